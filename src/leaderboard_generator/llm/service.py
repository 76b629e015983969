"""Provider registry with ordered fallback."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import httpx

from leaderboard_generator.exceptions import AllProvidersFailedError, ProviderError
from leaderboard_generator.llm.config import LLMSettings
from leaderboard_generator.llm.providers import BaseProvider, ChatResponse, build_provider

logger = logging.getLogger(__name__)


def send_with_fallback(
    providers: Sequence[BaseProvider],
    messages: Sequence[Mapping[str, str]],
    **options: Any,
) -> ChatResponse:
    """Send ``messages`` to the first provider that is available and answers.

    Providers are tried strictly in the given order; unavailable ones are
    skipped and failing ones are logged before moving on.

    Raises
    ------
    AllProvidersFailedError
        Carrying the last provider error, if no provider answered.
    """
    last_error: Optional[BaseException] = None
    for provider in providers:
        try:
            if not provider.check_availability():
                logger.info("Skipping unavailable provider: %s", provider.id)
                continue
            logger.info("Using provider: %s", provider.id)
            return provider.send_chat(messages, **options)
        except ProviderError as e:
            last_error = e
            logger.error("Provider %s failed: %s", provider.id, e)
    raise AllProvidersFailedError(last_error)


class LLMService:
    """Providers built from :class:`LLMSettings`, addressed by id.

    Parameters
    ----------
    settings : LLMSettings
        Parsed provider settings.
    transport : httpx.BaseTransport, optional
        Shared transport for every provider (tests).
    """

    def __init__(self, settings: LLMSettings, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings
        self.providers: Dict[str, BaseProvider] = {
            provider_id: build_provider(config, transport=transport)
            for provider_id, config in settings.providers.items()
        }
        logger.info("Registered LLM providers: %s", ", ".join(self.providers) or "none")

    def __enter__(self) -> "LLMService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        for provider in self.providers.values():
            provider.close()

    def get(self, provider_id: Optional[str] = None) -> BaseProvider:
        provider_id = provider_id or self.settings.default_provider
        if provider_id not in self.providers:
            raise ProviderError(str(provider_id), "LLM provider not found")
        return self.providers[provider_id]

    def send(
        self,
        messages: Sequence[Mapping[str, str]],
        provider_id: Optional[str] = None,
        use_fallback: bool = True,
        **options: Any,
    ) -> ChatResponse:
        """Send to ``provider_id`` (or the default), falling back in configured order."""
        if not use_fallback:
            return self.get(provider_id).send_chat(messages, **options)
        ordered = [self.providers[i] for i in self.settings.ordered_provider_ids(provider_id)]
        return send_with_fallback(ordered, messages, **options)

    def test_provider(self, provider_id: str, prompt: Optional[str] = None) -> Dict[str, Any]:
        """Probe and round-trip one provider; never raises for provider failures."""
        try:
            provider = self.get(provider_id)
            if not provider.check_availability():
                raise ProviderError(provider_id, provider.error_message or "Provider is not available")
            response = provider.test(prompt)
        except ProviderError as e:
            logger.error("Provider test failed for %s: %s", provider_id, e)
            return {"success": False, "provider": provider_id, "error": str(e)}
        return {
            "success": True,
            "provider": provider_id,
            "response": response.content,
            "model": response.model,
            "latency": response.latency_ms,
        }
