"""Keyword routing rules for the specialist agents.

Pure functions over normalised request text; no LLM calls. Matching is by
substring, so "address" counts as containing "add". The classifier tries the
page rules first, then creation, then modification, which resolves the
overlap between page and component phrasing.
"""

import re

PAGE_PHRASES = (
    "create page",
    "new page",
    "add page",
    "create a page",
    "create an page",
    "switch to",
    "go to",
    "navigate to",
    "delete page",
    "remove page",
    "page called",
    "page named",
)

_CREATE_TYPED_PAGE = re.compile(
    r"create\s+(a|an)\s+(new\s+)?(dashboard|about|home|pricing|contact|blog|settings|profile)\s+page"
)
_TRAILING_PAGE_TYPE = re.compile(r"\b(dashboard|about|home|contact|blog|settings|profile)(\s+page)?$")
_CREATE_VERB = re.compile(r"create|new|add")
_DELETE_PAGE = re.compile(r"(delete|remove)\s+(the\s+)?[\w\s]*page")

CREATION_VERBS = ("add", "create", "build", "insert")
COMPONENT_NOUNS = (
    "card", "button", "grid", "table", "heading", "text",
    "pricing", "hero", "feature", "testimonial", "footer",
    "section", "component", "element",
    "form", "contact", "login", "signup", "search", "input",
)

# "make" is an update verb only; as a creation verb it clashes with "make it primary"
UPDATE_VERBS = ("change", "update", "modify", "edit", "set", "make")
DELETE_VERBS = ("delete", "remove")
MOVE_VERBS = ("move",)
CREATION_WORDS = ("add", "create", "build")

CONJUNCTIONS = ("and", "then", "also", "plus", "with")
_CONJUNCTION = re.compile(r"\b(" + "|".join(CONJUNCTIONS) + r")\b|[,;]")


def normalize(text: str) -> str:
    return text.strip().lower()


def _contains_any(text: str, words) -> bool:
    return any(word in text for word in words)


def is_page_request(request: str) -> bool:
    """Explicit page management: create, switch to or delete a page."""
    text = normalize(request)

    if _contains_any(text, PAGE_PHRASES):
        return True
    if _CREATE_TYPED_PAGE.search(text):
        return True
    # "Create a dashboard"
    if _TRAILING_PAGE_TYPE.search(text) and _CREATE_VERB.search(text):
        return True
    # "Delete the pricing page"
    if _DELETE_PAGE.search(text):
        return True
    # "Add X to this page" is a component operation
    return False


def is_creation_request(request: str) -> bool:
    text = normalize(request)
    has_creation = _contains_any(text, CREATION_VERBS)
    has_component = _contains_any(text, COMPONENT_NOUNS)
    is_page_operation = "page" in text and ("create page" in text or "new page" in text)
    return has_creation and has_component and not is_page_operation


def is_modification_request(request: str) -> bool:
    text = normalize(request)
    has_verb = (
        _contains_any(text, UPDATE_VERBS)
        or _contains_any(text, DELETE_VERBS)
        or _contains_any(text, MOVE_VERBS)
    )
    is_creation = _contains_any(text, CREATION_WORDS)
    is_page_operation = "page" in text and _contains_any(text, DELETE_VERBS)
    return has_verb and not is_creation and not is_page_operation


def has_conjunction(request: str) -> bool:
    """Whether the request may bundle several intents."""
    return bool(_CONJUNCTION.search(normalize(request)))
