"""Profile knowledge base and context retrieval.

Responsibilities:
    - Loading and validating the bilingual Q&A dataset
    - Caching it as an immutable, process-wide table
    - Scoring entries against a user query and selecting the best few

The dataset ships with the package under ``data/profile.json``; a different
file can be supplied through ``KNOWLEDGE_BASE_PATH``.
"""

from src.knowledge.base import (
    DEFAULT_KNOWLEDGE_BASE_PATH,
    KnowledgeBase,
    KnowledgeBaseError,
    KnowledgeDocument,
    KnowledgeEntry,
    KnowledgeValidationError,
    MultilingualText,
    clear_knowledge_base_cache,
    get_knowledge_base,
    load_knowledge_base,
    parse_knowledge_data,
    validate_knowledge_data,
)
from src.knowledge.retriever import find_relevant_entries, rank_entries, score_relevance

__all__ = [
    "DEFAULT_KNOWLEDGE_BASE_PATH",
    "KnowledgeBase",
    "KnowledgeBaseError",
    "KnowledgeDocument",
    "KnowledgeEntry",
    "KnowledgeValidationError",
    "MultilingualText",
    "clear_knowledge_base_cache",
    "find_relevant_entries",
    "get_knowledge_base",
    "load_knowledge_base",
    "parse_knowledge_data",
    "rank_entries",
    "score_relevance",
    "validate_knowledge_data",
]
