"""Lightweight English/French language detection.

Counts common function words and French diacritics; anything too short or
ambiguous falls back to English.
"""

import re
from collections.abc import Sequence

from src.models.prompt import Language

MIN_DETECTION_LENGTH = 10

_WORD = re.compile(r"[^\W\d_]+(?:'[^\W\d_]+)?")
_FRENCH_ACCENTS = re.compile(r"[àâäçéèêëîïôöùûüÿœ]")

ENGLISH_WORDS = frozenset(
    {
        "the", "and", "is", "are", "you", "your", "what", "how", "who", "where",
        "do", "does", "have", "with", "about", "for", "this", "that", "my", "me",
        "can", "tell", "of", "to", "in", "it", "i'm", "i",
    }
)
FRENCH_WORDS = frozenset(
    {
        "le", "la", "les", "et", "est", "sont", "tu", "vous", "ton", "ta", "tes",
        "quel", "quelle", "quels", "comment", "qui", "où", "avec", "pour", "ce",
        "cette", "mon", "ma", "mes", "je", "peux", "parle", "des", "du", "un",
        "une", "en", "dans", "c'est", "qu'est", "moi",
    }
)


def detect_language(text: str) -> Language:
    """Guess whether ``text`` is English or French.

    Returns "en" for text shorter than ten characters or when the evidence
    is tied.
    """
    if not text or len(text.strip()) < MIN_DETECTION_LENGTH:
        return "en"

    lowered = text.lower()
    words = _WORD.findall(lowered)
    english = sum(1 for word in words if word in ENGLISH_WORDS)
    french = sum(1 for word in words if word in FRENCH_WORDS)
    french += len(_FRENCH_ACCENTS.findall(lowered))

    return "fr" if french > english else "en"


def detect_language_from_history(texts: Sequence[str]) -> Language:
    """Detect the language of a conversation from its last three messages."""
    if not texts:
        return "en"
    return detect_language(" ".join(texts[-3:]))
