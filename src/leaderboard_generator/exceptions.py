"""Exceptions raised by the leaderboard generator.

Every error carries a technical ``message`` (logged) and a shorter
``user_message`` (printed by the CLI).
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class LeaderboardGeneratorError(Exception):
    """Base exception for all generator errors."""

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class ConfigFileError(LeaderboardGeneratorError):
    """Raised when a configuration file is missing or is not valid JSON."""


class ConfigValidationError(LeaderboardGeneratorError):
    """Raised when a configuration violates the leaderboard schema.

    Attributes
    ----------
    errors : list
        Every :class:`~leaderboard_generator.validator.ValidationIssue` found.
    """

    def __init__(self, errors: Sequence):
        self.errors: List = list(errors)
        details = "; ".join(f"{e.path}: {e.message}" for e in self.errors)
        super().__init__(
            f"Invalid configuration ({len(self.errors)} error(s)): {details}",
            "Invalid configuration",
        )


class RenderError(LeaderboardGeneratorError):
    """Raised when template rendering fails."""

    def __init__(self, reason: str):
        super().__init__(f"Template rendering failed: {reason}")


class DatastoreError(LeaderboardGeneratorError):
    """Raised when the shared leaderboard datastore cannot be read or written."""


class NavigationError(LeaderboardGeneratorError):
    """Raised when navigation sync cannot run at all (e.g. missing site root)."""


class ProviderError(LeaderboardGeneratorError):
    """Raised when an LLM provider is misconfigured or a request fails."""

    def __init__(self, provider_id: str, details: str):
        self.provider_id = provider_id
        super().__init__(f"Provider '{provider_id}': {details}")


class AllProvidersFailedError(LeaderboardGeneratorError):
    """Raised when every provider in a fallback list failed."""

    def __init__(self, last_error: Optional[BaseException] = None):
        self.last_error = last_error
        reason = str(last_error) if last_error is not None else "Unknown error"
        super().__init__(f"All providers failed. Last error: {reason}")
