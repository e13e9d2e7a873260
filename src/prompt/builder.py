"""System prompt and message list assembly.

Combines the persona, the user's name, retrieved profile context and the
guardrail clause into one system message, then appends a bounded window of
prior turns and the new user message. Given the same inputs the output is
byte-identical; nothing here reads the clock or the network.
"""

from collections.abc import Sequence

from src.knowledge.base import KnowledgeEntry
from src.knowledge.retriever import find_relevant_entries
from src.models.prompt import DEFAULT_PROMPT_CONFIG, PromptConfig
from src.models.schemas import ChatMessage
from src.prompt.guardrails import RequestCategory, classify_request
from src.prompt.names import extract_user_name
from src.prompt.persona import (
    CONTEXT_HEADER,
    DIRECTIVES,
    GUARDRAIL_CLAUSE,
    NO_CONTEXT_SENTINEL,
    PERSONA_TEMPLATE,
    USER_NAME_CLAUSE,
)

ELLIPSIS = "..."
SECTION_SEPARATOR = "\n\n"


def truncate_text(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters and mark the cut with "..."."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + ELLIPSIS


def truncate_message(message: ChatMessage, max_length: int) -> ChatMessage:
    if len(message.content) <= max_length:
        return message
    return message.model_copy(update={"content": truncate_text(message.content, max_length)})


def _clip(text: str, limit: int) -> str:
    # Like truncate_text, but the result including the marker fits in limit
    if len(text) <= limit:
        return text
    if limit <= len(ELLIPSIS):
        return text[:limit]
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def format_profile_context(
    entries: Sequence[KnowledgeEntry],
    language: str,
    max_chars: int,
) -> str:
    """Render entries as a numbered Q/A list, clipped to ``max_chars``."""
    if not entries:
        return NO_CONTEXT_SENTINEL[language]

    lines = [
        f"{index}. Q: {entry.question.get(language)}\n   A: {entry.answer.get(language)}"
        for index, entry in enumerate(entries, start=1)
    ]
    return _clip(SECTION_SEPARATOR.join(lines), max_chars)


def build_system_prompt(
    entries: Sequence[KnowledgeEntry],
    config: PromptConfig | None = None,
    user_name: str | None = None,
    category: RequestCategory | None = None,
) -> str:
    """Build the system prompt for one request.

    Section order: persona, user name, profile context, guardrails and the
    directive for ``category``. The context block is shrunk first when the
    prompt would exceed ``max_system_prompt_chars``, so the guardrail
    clause always survives.
    """
    config = config or DEFAULT_PROMPT_CONFIG
    language = config.language

    head = [PERSONA_TEMPLATE]
    if user_name:
        head.append(USER_NAME_CLAUSE[language].format(name=" ".join(user_name.split())))

    tail: list[str] = []
    if config.include_guardrails:
        tail.append(GUARDRAIL_CLAUSE)
        if category is not None and category is not RequestCategory.NORMAL:
            tail.append(DIRECTIVES[category.value])

    context_section = NO_CONTEXT_SENTINEL[language]
    if entries:
        header = CONTEXT_HEADER[language]
        fixed_length = len(SECTION_SEPARATOR.join([*head, *tail])) + len(SECTION_SEPARATOR)
        room = config.max_system_prompt_chars - fixed_length - len(header) - 1
        budget = min(config.max_profile_context_chars, room)
        if budget > len(ELLIPSIS):
            context_section = f"{header}\n{format_profile_context(entries, language, budget)}"

    prompt = SECTION_SEPARATOR.join([*head, context_section, *tail])
    return _clip(prompt, config.max_system_prompt_chars)


def build_chat_messages(
    user_message: str,
    history: Sequence[ChatMessage],
    config: PromptConfig | None = None,
    user_name: str | None = None,
    *,
    entries: Sequence[KnowledgeEntry] | None = None,
) -> list[ChatMessage]:
    """Assemble the provider-agnostic message list for one request.

    Args:
        user_message: The new user message.
        history: Prior turns, oldest first.
        config: Prompt settings; defaults apply when omitted.
        user_name: Known user name; extracted from history when omitted.
        entries: Knowledge entries to search. Defaults to the cached
            knowledge base.

    Returns:
        ``[system] + last max_history_turns * 2 history messages + [user]``,
        with every history and user message cut to ``max_message_length``.

    Raises:
        KnowledgeBaseError: If the cached knowledge base cannot be loaded.
    """
    config = config or DEFAULT_PROMPT_CONFIG

    relevant = find_relevant_entries(user_message, config, entries)
    name = user_name or extract_user_name(history)
    category = (
        classify_request(user_message, has_context=bool(relevant))
        if config.include_guardrails
        else None
    )
    system_prompt = build_system_prompt(relevant, config, name, category)

    window = config.max_history_turns * 2
    recent = list(history[-window:]) if window > 0 else []
    trimmed = [truncate_message(message, config.max_message_length) for message in recent]
    latest = ChatMessage(
        role="user",
        content=truncate_text(user_message, config.max_message_length),
    )

    return [ChatMessage(role="system", content=system_prompt), *trimmed, latest]
