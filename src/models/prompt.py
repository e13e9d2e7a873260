"""Prompt assembly configuration."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Language = Literal["en", "fr"]


class PromptConfig(BaseModel):
    """Tuning knobs for context retrieval and prompt assembly.

    Pure value object. Callers override individual fields per request with
    ``PromptConfig().model_copy(update=...)`` or by passing keyword
    arguments; everything else keeps its default.

    Attributes:
        max_context_entries: Upper bound on knowledge entries injected.
        context_relevance_threshold: Minimum relevance score to inject an entry.
        language: Language used for scoring and rendering ("en" or "fr").
        include_guardrails: Append the guardrail clause and request directive.
        max_history_turns: Prior turns kept (one turn = user + assistant).
        max_message_length: Longer messages are cut to this length plus "...".
        max_profile_context_chars: Upper bound on the rendered context block.
        max_system_prompt_chars: Upper bound on the whole system prompt.
    """

    model_config = ConfigDict(frozen=True)

    max_context_entries: int = Field(default=3, ge=0)
    context_relevance_threshold: float = Field(default=0.3, ge=0.0)
    language: Language = "en"
    include_guardrails: bool = True
    max_history_turns: int = Field(default=4, ge=0)
    max_message_length: int = Field(default=1000, ge=1)
    max_profile_context_chars: int = Field(default=800, ge=1)
    max_system_prompt_chars: int = Field(default=4000, ge=1)


DEFAULT_PROMPT_CONFIG = PromptConfig()
