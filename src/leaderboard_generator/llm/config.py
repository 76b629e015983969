"""LLM provider settings.

Settings are a JSON or YAML document::

    {
      "defaultProvider": "openai",
      "providers": {
        "openai": {"type": "openai", "apiKey": "sk-..."},
        "localllm": {"type": "local", "baseUrl": "http://localhost:8000/v1"}
      },
      "fallbackOrder": ["openai", "localllm"]
    }

The document is checked against :data:`LLM_SETTINGS_SCHEMA` and each provider
entry is turned into a typed config by :func:`parse_provider_config`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from jsonschema import Draft7Validator
from omegaconf import OmegaConf

from leaderboard_generator.exceptions import ConfigFileError, ConfigValidationError, ProviderError
from leaderboard_generator.validator import ValidationIssue

logger = logging.getLogger(__name__)

PROVIDER_TYPES = ("openai", "local", "proxy")
AUTH_TYPES = ("bearer", "header", "query")

OPENAI_BASE_URL = "https://api.openai.com/v1"
LOCAL_BASE_URL = "http://localhost:8000/v1"
DEFAULT_TIMEOUT_MS = 30000


def _requires(provider_type: str, fields: List[str]) -> Dict[str, Any]:
    return {
        "if": {"properties": {"type": {"const": provider_type}}},
        "then": {"required": fields},
    }


PROVIDER_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["type"],
    "properties": {
        "type": {"type": "string", "enum": list(PROVIDER_TYPES)},
        "name": {"type": "string"},
        "baseUrl": {"type": "string"},
        "apiKey": {"type": "string"},
        "defaultModel": {"type": "string"},
        "models": {"type": "array", "items": {"type": "string"}},
        "timeout": {"type": "integer", "minimum": 1},
        "serverType": {"type": "string"},
        "startupTimeout": {"type": "integer", "minimum": 1},
        "startupRetries": {"type": "integer", "minimum": 1},
        "requiresAuth": {"type": "boolean"},
        "authType": {"type": "string", "enum": list(AUTH_TYPES)},
        "authHeaderName": {"type": "string"},
        "authQueryParam": {"type": "string"},
    },
    "allOf": [
        _requires("openai", ["apiKey"]),
        _requires("local", ["baseUrl"]),
        _requires("proxy", ["baseUrl"]),
    ],
}

LLM_SETTINGS_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["providers"],
    "properties": {
        "defaultProvider": {"type": "string"},
        "providers": {"type": "object", "additionalProperties": PROVIDER_SCHEMA},
        "fallbackOrder": {"type": "array", "items": {"type": "string"}},
    },
}

_SETTINGS_VALIDATOR = Draft7Validator(LLM_SETTINGS_SCHEMA)


@dataclass
class ProviderConfig:
    """Fields shared by every provider type. ``timeout`` is in milliseconds."""

    id: str
    base_url: str
    api_key: Optional[str] = None
    name: Optional[str] = None
    default_model: Optional[str] = None
    models: List[str] = field(default_factory=list)
    timeout: int = DEFAULT_TIMEOUT_MS

    type = "base"

    @property
    def display_name(self) -> str:
        return self.name or self.type

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000.0


@dataclass
class OpenAIProviderConfig(ProviderConfig):
    type = "openai"

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ProviderError(self.id, "API key is required for openai provider")
        self.base_url = (self.base_url or OPENAI_BASE_URL).rstrip("/")
        self.models = self.models or ["gpt-4", "gpt-3.5-turbo"]
        self.default_model = self.default_model or "gpt-4"


@dataclass
class LocalProviderConfig(ProviderConfig):
    """Self-hosted OpenAI-compatible server (Ollama, LM Studio, vLLM...)."""

    server_type: str = "ollama"
    startup_timeout: int = 30000
    startup_retries: int = 3

    type = "local"

    def __post_init__(self) -> None:
        self.base_url = (self.base_url or LOCAL_BASE_URL).rstrip("/")
        self.models = self.models or ["llama3", "mistral"]
        self.default_model = self.default_model or "llama3"


@dataclass
class ProxyProviderConfig(ProviderConfig):
    requires_auth: bool = True
    auth_type: str = "bearer"
    auth_header_name: str = "Authorization"
    auth_query_param: str = "api_key"

    type = "proxy"

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ProviderError(self.id, "Base URL is required for proxy provider")
        if self.auth_type not in AUTH_TYPES:
            raise ProviderError(self.id, f"Unknown auth type {self.auth_type!r}")
        base = self.base_url.rstrip("/")
        self.base_url = base if base.endswith("/v1") else f"{base}/v1"
        self.models = self.models or ["default-model"]
        self.default_model = self.default_model or self.models[0]


def parse_provider_config(provider_id: str, raw: Mapping[str, Any]) -> ProviderConfig:
    """Turn one ``providers`` entry into its typed config.

    Raises
    ------
    ProviderError
        For an unknown ``type`` or missing type-specific fields.
    """
    common = {
        "id": provider_id,
        "base_url": raw.get("baseUrl", ""),
        "api_key": raw.get("apiKey") or None,
        "name": raw.get("name"),
        "default_model": raw.get("defaultModel"),
        "models": list(raw.get("models") or []),
        "timeout": raw.get("timeout", DEFAULT_TIMEOUT_MS),
    }
    provider_type = raw.get("type")
    if provider_type == "openai":
        return OpenAIProviderConfig(**common)
    if provider_type == "local":
        return LocalProviderConfig(
            **common,
            server_type=raw.get("serverType", "ollama"),
            startup_timeout=raw.get("startupTimeout", 30000),
            startup_retries=raw.get("startupRetries", 3),
        )
    if provider_type == "proxy":
        return ProxyProviderConfig(
            **common,
            requires_auth=raw.get("requiresAuth", True),
            auth_type=raw.get("authType", "bearer"),
            auth_header_name=raw.get("authHeaderName", "Authorization"),
            auth_query_param=raw.get("authQueryParam", "api_key"),
        )
    raise ProviderError(provider_id, f"Unsupported LLM provider type: {provider_type}")


@dataclass
class LLMSettings:
    """Parsed provider settings.

    Attributes
    ----------
    providers : Dict[str, ProviderConfig]
        Provider configs keyed by id, in document order.
    default_provider : str, optional
        Provider used first; falls back to the first configured provider.
    fallback_order : List[str]
        Providers to try, in order, when the preferred one fails.
    """

    providers: Dict[str, ProviderConfig] = field(default_factory=dict)
    default_provider: Optional[str] = None
    fallback_order: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.default_provider not in self.providers:
            first = next(iter(self.providers), None)
            if self.default_provider is not None:
                logger.info("Default provider %s not found, using %s", self.default_provider, first)
            self.default_provider = first

    def ordered_provider_ids(self, preferred: Optional[str] = None) -> List[str]:
        """Provider ids to try: ``preferred`` (or the default), then the fallback order.

        Unknown ids are dropped and each id appears once.

        >>> settings = LLMSettings(
        ...     providers={"a": LocalProviderConfig("a", "http://a"), "b": LocalProviderConfig("b", "http://b")},
        ...     default_provider="a",
        ...     fallback_order=["b", "missing", "a"],
        ... )
        >>> settings.ordered_provider_ids()
        ['a', 'b']
        """
        ordered: List[str] = []
        for provider_id in [preferred or self.default_provider, *self.fallback_order]:
            if provider_id in self.providers and provider_id not in ordered:
                ordered.append(provider_id)
        return ordered


def validate_llm_settings(document: Any) -> List[ValidationIssue]:
    issues = []
    for error in _SETTINGS_VALIDATOR.iter_errors(document):
        path = "/" + "/".join(str(p) for p in error.absolute_path)
        issues.append(ValidationIssue(path, error.message))
    return issues


def parse_llm_settings(document: Mapping[str, Any]) -> LLMSettings:
    """Validate a settings document and build :class:`LLMSettings`.

    Raises
    ------
    ConfigValidationError
        If the document violates :data:`LLM_SETTINGS_SCHEMA`.
    """
    issues = validate_llm_settings(document)
    if issues:
        raise ConfigValidationError(issues)

    providers = {
        provider_id: parse_provider_config(provider_id, raw) for provider_id, raw in document["providers"].items()
    }
    return LLMSettings(
        providers=providers,
        default_provider=document.get("defaultProvider"),
        fallback_order=list(document.get("fallbackOrder") or []),
    )


def load_llm_settings(path: Union[str, Path]) -> LLMSettings:
    """Read LLM settings from a JSON or YAML file."""
    settings_path = Path(path)
    if not settings_path.exists():
        raise ConfigFileError(f"LLM settings file not found: {settings_path}")
    try:
        document = OmegaConf.to_container(OmegaConf.load(settings_path), resolve=True)
    except Exception as e:
        raise ConfigFileError(f"Failed to parse LLM settings {settings_path}: {e}") from e
    logger.info("Loaded LLM configuration from %s", settings_path)
    return parse_llm_settings(document)
