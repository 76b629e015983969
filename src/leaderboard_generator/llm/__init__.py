"""LLM helpers for drafting leaderboard configurations through chat."""

from leaderboard_generator.llm.chat import ChatSession, Stage, apply_config_update, extract_config_update
from leaderboard_generator.llm.config import LLMSettings, load_llm_settings, parse_llm_settings
from leaderboard_generator.llm.providers import ChatResponse, build_provider
from leaderboard_generator.llm.service import LLMService, send_with_fallback

__all__ = [
    "ChatSession",
    "Stage",
    "apply_config_update",
    "extract_config_update",
    "LLMSettings",
    "load_llm_settings",
    "parse_llm_settings",
    "ChatResponse",
    "build_provider",
    "LLMService",
    "send_with_fallback",
]
