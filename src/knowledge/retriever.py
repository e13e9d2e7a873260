"""Keyword relevance scoring over the profile knowledge base.

Transparent rank-and-filter, not semantic search: the score is a fixed
formula over substring matches, so results are reproducible for a given
dataset and query.
"""

from collections.abc import Sequence

from src.knowledge.base import KnowledgeEntry, get_knowledge_base
from src.models.prompt import DEFAULT_PROMPT_CONFIG, PromptConfig

# Points awarded for a full-query match
QUESTION_PHRASE_WEIGHT = 10
ANSWER_PHRASE_WEIGHT = 5
TAG_PHRASE_WEIGHT = 7

# Points awarded per matching query token
QUESTION_TOKEN_WEIGHT = 2
ANSWER_TOKEN_WEIGHT = 1
TAG_TOKEN_WEIGHT = 3

# Tokens of this length or shorter are ignored
MIN_TOKEN_LENGTH = 3


def query_tokens(query: str) -> list[str]:
    """Split a lower-cased query into the tokens that count for scoring."""
    return [token for token in query.lower().split() if len(token) > MIN_TOKEN_LENGTH]


def score_relevance(entry: KnowledgeEntry, query: str, language: str = "en") -> float:
    """Score how well ``entry`` matches ``query`` in ``language``.

    The accumulated points are divided by the number of qualifying tokens
    plus one, so long queries do not win just by having more words.
    """
    lowered = query.lower()
    question = entry.question.get(language).lower()
    answer = entry.answer.get(language).lower()
    tags = " ".join(entry.tags).lower()

    score = 0
    if lowered in question:
        score += QUESTION_PHRASE_WEIGHT
    if lowered in answer:
        score += ANSWER_PHRASE_WEIGHT
    if lowered in tags:
        score += TAG_PHRASE_WEIGHT

    tokens = query_tokens(lowered)
    for token in tokens:
        if token in question:
            score += QUESTION_TOKEN_WEIGHT
        if token in answer:
            score += ANSWER_TOKEN_WEIGHT
        if token in tags:
            score += TAG_TOKEN_WEIGHT

    return score / (len(tokens) + 1)


def rank_entries(
    query: str,
    entries: Sequence[KnowledgeEntry],
    config: PromptConfig = DEFAULT_PROMPT_CONFIG,
) -> list[tuple[KnowledgeEntry, float]]:
    """Return ``(entry, score)`` pairs above the threshold, best first.

    Ties keep knowledge base order.
    """
    scored = [(entry, score_relevance(entry, query, config.language)) for entry in entries]
    kept = [pair for pair in scored if pair[1] >= config.context_relevance_threshold]
    kept.sort(key=lambda pair: pair[1], reverse=True)
    return kept[: config.max_context_entries]


def find_relevant_entries(
    query: str,
    config: PromptConfig | None = None,
    entries: Sequence[KnowledgeEntry] | None = None,
) -> list[KnowledgeEntry]:
    """Find the knowledge entries most relevant to ``query``.

    Args:
        query: Free-text user message.
        config: Retrieval settings (threshold, limit, language).
        entries: Entries to search. Defaults to the cached knowledge base.

    Returns:
        At most ``config.max_context_entries`` entries, each scoring at
        least ``config.context_relevance_threshold``, best first.

    Raises:
        KnowledgeBaseError: If the cached knowledge base cannot be loaded.
    """
    config = config or DEFAULT_PROMPT_CONFIG
    if entries is None:
        entries = get_knowledge_base().entries
    return [entry for entry, _ in rank_entries(query, entries, config)]
