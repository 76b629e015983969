"""OpenAI-compatible chat providers over ``httpx``.

All three provider types speak the same two endpoints, ``GET /models`` and
``POST /chat/completions``; they differ in defaults and in how credentials
are attached to a request.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import httpx

from leaderboard_generator.exceptions import ProviderError
from leaderboard_generator.llm.config import (
    LocalProviderConfig,
    OpenAIProviderConfig,
    ProviderConfig,
    ProxyProviderConfig,
)

logger = logging.getLogger(__name__)

EXTRACTION_INSTRUCTIONS = """You are an assistant helping to create a leaderboard for the Quantum Advantage Framework.

When the user provides information about the leaderboard they want to create, extract structured data from their request.
Respond conversationally, but also include a JSON object with the extracted configuration data.

The JSON should be formatted as follows:
```json
{
  "extractedConfig": {
    // Configuration fields based on the user's request
  }
}
```

Only include fields that you can confidently extract from the user's message."""

LOCAL_PROBE_TIMEOUT = 5.0
STARTUP_RETRY_DELAY = 2.0


@dataclass
class ChatResponse:
    """Assistant reply plus request metadata."""

    content: str
    provider: str
    model: Optional[str] = None
    usage: Dict[str, Any] = field(default_factory=dict)
    latency_ms: int = 0
    role: str = "assistant"


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message") or response.reason_phrase
    return response.text or response.reason_phrase


class BaseProvider:
    """Shared request logic for OpenAI-compatible servers.

    Parameters
    ----------
    config : ProviderConfig
        Typed provider settings.
    transport : httpx.BaseTransport, optional
        Custom transport, e.g. ``httpx.MockTransport`` in tests.
    """

    error_prefix = "API error"

    def __init__(self, config: ProviderConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self.available = False
        self.error_message: Optional[str] = None
        self._client = httpx.Client(timeout=config.timeout_seconds, transport=transport)

    @property
    def id(self) -> str:
        return self.config.id

    def __enter__(self) -> "BaseProvider":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def params(self) -> Dict[str, str]:
        return {}

    def url(self, endpoint: str) -> str:
        return f"{self.config.base_url}/{endpoint.lstrip('/')}"

    def has_credentials(self) -> bool:
        return True

    def _request(self, method: str, endpoint: str, timeout: Optional[float] = None, **kwargs: Any) -> httpx.Response:
        request_kwargs: Dict[str, Any] = {"headers": self.headers(), "params": self.params(), **kwargs}
        if timeout is not None:
            request_kwargs["timeout"] = timeout
        try:
            response = self._client.request(method, self.url(endpoint), **request_kwargs)
        except httpx.HTTPError as e:
            raise ProviderError(self.id, f"{self.error_prefix}: {e}") from e
        if response.is_error:
            raise ProviderError(self.id, f"{self.error_prefix}: {_error_detail(response)}")
        return response

    def _probe_timeout(self) -> Optional[float]:
        return None

    def check_availability(self) -> bool:
        """Probe ``GET /models``; record and log the failure reason on error."""
        if not self.has_credentials():
            logger.warning("No API key provided for %s provider (%s)", self.config.type, self.id)
            self.error_message = "No API key provided"
            self.available = False
            return False
        try:
            self._request("GET", "/models", timeout=self._probe_timeout())
        except ProviderError as e:
            logger.error("Error checking availability for %s provider (%s): %s", self.config.type, self.id, e)
            self.error_message = str(e)
            self.available = False
            return False
        self.error_message = None
        self.available = True
        return True

    def _model_ids(self, payload: Mapping[str, Any]) -> List[str]:
        return [model["id"] for model in payload.get("data") or [] if "id" in model]

    def list_models(self) -> List[str]:
        """Models reported by the server, or the configured list on failure."""
        try:
            payload = self._request("GET", "/models").json()
        except (ProviderError, ValueError) as e:
            logger.error("Error getting models for %s provider (%s): %s", self.config.type, self.id, e)
            return list(self.config.models)
        model_ids = self._model_ids(payload)
        if model_ids:
            self.config.models = model_ids
        return list(self.config.models)

    def send_chat(
        self,
        messages: Sequence[Mapping[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        extract_config: bool = True,
    ) -> ChatResponse:
        """Send a chat completion request.

        Parameters
        ----------
        messages : Sequence[Mapping[str, str]]
            ``{"role", "content"}`` messages, oldest first.
        model : str, optional
            Defaults to the provider's ``default_model``.
        temperature : float, default=0.7
        max_tokens : int, default=2048
        extract_config : bool, default=True
            Prepend the system instructions asking for an ``extractedConfig``
            JSON block.

        Raises
        ------
        ProviderError
            On transport errors, non-2xx replies or malformed bodies.
        """
        model = model or self.config.default_model
        formatted = [{"role": m["role"], "content": m["content"]} for m in messages]
        if extract_config:
            formatted.insert(0, {"role": "system", "content": EXTRACTION_INSTRUCTIONS})

        body = {
            "model": model,
            "messages": formatted,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "n": 1,
            "stream": False,
        }
        start = time.monotonic()
        response = self._request("POST", "/chat/completions", json=body)
        latency_ms = int((time.monotonic() - start) * 1000)

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(self.id, f"Malformed chat completion response: {e}") from e

        logger.info("Processed message with %s provider (%s) in %dms", self.config.type, self.id, latency_ms)
        return ChatResponse(
            content=content,
            provider=self.id,
            model=data.get("model") or model,
            usage=data.get("usage") or {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0},
            latency_ms=latency_ms,
        )

    def test(self, prompt: Optional[str] = None) -> ChatResponse:
        """Round-trip a short conversation to confirm the provider works."""
        messages = [
            {"role": "system", "content": "You are a helpful assistant."},
            {"role": "user", "content": prompt or "Hello, are you working correctly?"},
        ]
        return self.send_chat(messages, extract_config=False)


class OpenAIProvider(BaseProvider):
    error_prefix = "OpenAI API error"

    def has_credentials(self) -> bool:
        return bool(self.config.api_key)

    def headers(self) -> Dict[str, str]:
        return {**super().headers(), "Authorization": f"Bearer {self.config.api_key}"}

    def _model_ids(self, payload: Mapping[str, Any]) -> List[str]:
        # chat models only
        return [model_id for model_id in super()._model_ids(payload) if "gpt" in model_id]


class LocalProvider(BaseProvider):
    error_prefix = "Local LLM server error"

    config: LocalProviderConfig

    def _probe_timeout(self) -> Optional[float]:
        return LOCAL_PROBE_TIMEOUT

    def _model_ids(self, payload: Mapping[str, Any]) -> List[str]:
        if self.config.server_type == "ollama":
            return [model.get("id") or model.get("name") for model in payload.get("models") or []]
        return super()._model_ids(payload)

    def wait_until_available(self, sleep: Callable[[float], None] = time.sleep) -> bool:
        """Probe the server up to ``startup_retries`` times."""
        for attempt in range(1, self.config.startup_retries + 1):
            if self.check_availability():
                return True
            if attempt < self.config.startup_retries:
                logger.info("Retrying connection to local LLM server (%d/%d)...", attempt, self.config.startup_retries)
                sleep(STARTUP_RETRY_DELAY)
        self.error_message = f"Failed to connect to local LLM server after {self.config.startup_retries} retries"
        logger.warning(self.error_message)
        return False


class ProxyProvider(BaseProvider):
    config: ProxyProviderConfig

    def has_credentials(self) -> bool:
        return not self.config.requires_auth or bool(self.config.api_key)

    def _authenticated(self) -> bool:
        return self.config.requires_auth and bool(self.config.api_key)

    def headers(self) -> Dict[str, str]:
        headers = super().headers()
        if self._authenticated():
            if self.config.auth_type == "bearer":
                headers[self.config.auth_header_name] = f"Bearer {self.config.api_key}"
            elif self.config.auth_type == "header":
                headers[self.config.auth_header_name] = self.config.api_key
        return headers

    def params(self) -> Dict[str, str]:
        if self._authenticated() and self.config.auth_type == "query":
            return {self.config.auth_query_param: self.config.api_key}
        return {}


def build_provider(config: ProviderConfig, transport: Optional[httpx.BaseTransport] = None) -> BaseProvider:
    """Instantiate the provider class matching ``config``."""
    if isinstance(config, OpenAIProviderConfig):
        return OpenAIProvider(config, transport=transport)
    if isinstance(config, LocalProviderConfig):
        return LocalProvider(config, transport=transport)
    if isinstance(config, ProxyProviderConfig):
        return ProxyProvider(config, transport=transport)
    raise ProviderError(config.id, f"Unsupported LLM provider type: {config.type}")
