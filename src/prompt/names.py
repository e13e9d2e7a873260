"""User name extraction from self-introductions (English and French)."""

import re
from collections.abc import Sequence

from src.models.schemas import ChatMessage

_NAME = r"([^\W\d_]{2,})"

NAME_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        rf"\bmy name is\s+{_NAME}",
        rf"\byou can call me\s+{_NAME}",
        rf"\bcall me\s+{_NAME}",
        rf"\bi'm\s+{_NAME}",
        rf"\bi am\s+{_NAME}",
        rf"\bje m'appelle\s+{_NAME}",
        rf"\bmon nom est\s+{_NAME}",
        rf"\bappelez-moi\s+{_NAME}",
        rf"\bje suis\s+{_NAME}",
    )
)

# Words that follow "I'm" / "je suis" far more often than a name does
NAME_STOPWORDS = frozenset(
    {
        "the", "and", "but", "for", "not", "you", "all", "can", "will", "just",
        "very", "here", "fine", "good", "great", "okay", "sure", "ready", "back",
        "looking", "interested", "curious", "trying", "wondering", "new", "from",
        "also", "still", "really", "so", "too", "an", "in", "at", "on", "sorry",
        "bien", "avec", "pour", "un", "une", "le", "la", "les", "de", "du", "en",
        "très", "pas", "ici", "content", "contente", "désolé", "désolée",
        "intéressé", "intéressée", "curieux", "curieuse", "nouveau", "nouvelle",
    }
)


def extract_user_name(history: Sequence[ChatMessage]) -> str | None:
    """Find the user's name in their most recent self-introduction.

    User messages are scanned newest first; within a message the patterns
    are tried in order and the first match outside ``NAME_STOPWORDS`` wins.

    Returns:
        The capitalized name, or None if nobody introduced themselves.
    """
    for message in reversed(history):
        if message.role != "user":
            continue
        for pattern in NAME_PATTERNS:
            match = pattern.search(message.content)
            if match is None:
                continue
            candidate = match.group(1)
            if candidate.lower() in NAME_STOPWORDS:
                continue
            return candidate[0].upper() + candidate[1:].lower()
    return None
