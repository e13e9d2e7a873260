"""Pattern-based classification of user messages.

Pure functions, kept apart from prompt assembly so they can be tuned and
tested on their own. The assembler turns the result into a directive in the
system prompt; the chat endpoint can optionally answer some categories
directly with the canned responses below.
"""

import re
from enum import Enum

from src.prompt.persona import CONTACT_EMAIL


class RequestCategory(str, Enum):
    """What kind of message the user sent, as far as guardrails care."""

    NORMAL = "normal"
    JAILBREAK = "jailbreak"
    OUT_OF_SCOPE = "out_of_scope"
    PROJECT_INQUIRY = "project_inquiry"
    SIMPLE_FACT = "simple_fact"
    NEEDS_CLARIFICATION = "needs_clarification"


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


JAILBREAK_PATTERNS = _compile(
    # prompt disclosure
    r"(?:give|show|reveal|tell).*(?:system\s+prompt|preprompt|instructions|system\s+message|initial\s+prompt)",
    r"(?:what\s+is|what's|what\s+are).*(?:your\s+system\s+prompt|your\s+instructions|your\s+prompt)",
    r"(?:reveal|expose).*instructions",
    r"system\s+prompt",
    r"preprompt",
    # persona bypass
    r"\b(?:act\s+as|roleplay\s+as|pretend\s+to\s+be|play\s+the\s+role\s+of)\b(?!\s+yourself)",
    r"forget.*everything.*and",
    r"ignore.*previous.*instructions",
    r"disregard.*rules",
    r"(?:from\s+now\s+on|henceforth|going\s+forward).*(?:ignore|forget|disregard)",
    r"execute\s+command",
    r"developer\s+mode",
    # model and configuration probing
    r"what\s+model\s+are\s+you",
    r"(?:what|which).*\bapi\b.*(?:are\s+you|use|using)",
    # French
    r"(?:montre|donne|révèle).*(?:instructions|prompt\s+système)",
    r"ignore.*instructions\s+précédentes",
)

OUT_OF_SCOPE_PATTERNS = _compile(
    r"(?:help|show|teach|write|create|build|develop).*\bcode\b",
    r"(?:write|create|build|develop).*\bapp\b",
    r"(?:help|fix|debug|solve).*programming",
    r"(?:write|create).*\bscript\b",
    r"(?:build|make).*website",
    r"(?:teach\s+me|learn).*programming",
    r"(?:configure|deploy).*application",
    r"(?:help\s+with).*(?:backend|frontend|database|server)",
    r"(?:market|business|financial).*analysis",
    r"\b(?:hack|crack|bypass|exploit)\b",
    r"(?:explain|define|what\s+is).*\b(?:science|history|math|geography|politics)\b",
    # French
    r"(?:écris|écrire|crée|créer|code).*(?:code|script|site)",
    r"aide.*(?:programmation|déboguer)",
)

PROJECT_INQUIRY_PATTERNS = _compile(
    r"(?:create|build|develop|start).*\bproject\b",
    r"(?:work|collaborate|partner).*\bproject\b",
    r"(?:available|hire|freelance).*\bproject\b",
    r"(?:business|startup|venture).*opportunity",
    r"partner\s+on\s+a\s+startup",
    r"(?:hire|work).*with.*you",
    r"(?:available|take).*clients?",
    r"(?:offer|provide).*(?:services?|development)",
    # French
    r"(?:travailler|collaborer).*(?:avec\s+toi|avec\s+vous|projet)",
    r"(?:embaucher|recruter)",
)

SIMPLE_FACT_PATTERNS = _compile(
    r"^(?:how\s+old|what\s+age|age\b)",
    r"^(?:where.*from|where.*born|where.*live)",
    r"^(?:what.*name|who.*you)",
    r"^(?:what\s+do\s+you\s+do|what's\s+your\s+job)",
    r"^where.*work",
    r"^(?:quel\s+âge|âge\b)",
    r"^(?:d'où.*viens|où.*né|où.*habites)",
    r"^(?:quel.*nom|qui.*tu)",
    r"^(?:que\s+fais-tu|quel\s+travail)",
    r"^où.*travailles",
)


def _matches(patterns: tuple[re.Pattern[str], ...], text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)


def is_jailbreak_attempt(query: str) -> bool:
    """Detect attempts to extract instructions or break out of the persona."""
    return _matches(JAILBREAK_PATTERNS, query)


def is_out_of_scope_request(query: str) -> bool:
    """Detect requests for services rather than questions about the profile."""
    return _matches(OUT_OF_SCOPE_PATTERNS, query)


def is_project_inquiry(query: str) -> bool:
    """Detect collaboration or hiring inquiries that belong in an email."""
    return _matches(PROJECT_INQUIRY_PATTERNS, query)


def is_simple_fact_question(query: str) -> bool:
    """Detect short personal-fact questions (age, origin, name, job)."""
    return _matches(SIMPLE_FACT_PATTERNS, query.strip())


def needs_clarification(query: str, has_context: bool) -> bool:
    """A vague query (fewer than 3 words) with nothing relevant to go on."""
    return not has_context and len(query.split()) < 3


def classify_request(query: str, has_context: bool = True) -> RequestCategory:
    """Classify a user message; the first matching category wins.

    Order: jailbreak, project inquiry, out of scope, simple fact,
    needs clarification.
    """
    if is_jailbreak_attempt(query):
        return RequestCategory.JAILBREAK
    if is_project_inquiry(query):
        return RequestCategory.PROJECT_INQUIRY
    if is_out_of_scope_request(query):
        return RequestCategory.OUT_OF_SCOPE
    if is_simple_fact_question(query):
        return RequestCategory.SIMPLE_FACT
    if needs_clarification(query, has_context):
        return RequestCategory.NEEDS_CLARIFICATION
    return RequestCategory.NORMAL


def out_of_scope_response(language: str = "en") -> str:
    if language == "fr":
        return (
            "J'apprécie la question, mais cela sort de mon domaine. "
            f"Écris-moi directement : {CONTACT_EMAIL}"
        )
    return (
        "I appreciate the question, but that's outside what I can help with here. "
        f"Reach me directly at {CONTACT_EMAIL}"
    )


def project_inquiry_response(language: str = "en") -> str:
    if language == "fr":
        return f"Pour parler projets et opportunités, écris-moi à {CONTACT_EMAIL}"
    return f"For project discussions and opportunities, please email me at {CONTACT_EMAIL}"


def clarification_prompt(language: str = "en") -> str:
    if language == "fr":
        return (
            "Avec plaisir ! Peux-tu préciser ce que tu cherches ? "
            "Par exemple mon parcours, mes compétences ou un projet en particulier."
        )
    return (
        "Happy to help! Could you tell me a bit more about what you're looking for? "
        "For example my background, my skills, or a specific project."
    )


def canned_response(category: RequestCategory, language: str = "en") -> str | None:
    """Return the fixed reply for categories answered without the model."""
    if category is RequestCategory.OUT_OF_SCOPE:
        return out_of_scope_response(language)
    if category is RequestCategory.PROJECT_INQUIRY:
        return project_inquiry_response(language)
    return None
