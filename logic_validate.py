# logic_validate.py
"""
Request Validation
Sanitizes user input and error messages before they reach the backend or the user
"""
import re

from models import FAMILIES

MAX_QUERY_LENGTH = 100

_UNSAFE_CHARS = re.compile(r"[<>{}\[\]\\/=;`\"]")
_PERFUME_ID = re.compile(r"^[a-zA-Z0-9-]{1,50}$")
_PATH = re.compile(r"/[^\s]+")
_LOCALHOST = re.compile(r"localhost:\d+")

VALID_CATEGORIES = ["all"] + [family.lower() for family in FAMILIES]

GENERIC_ERROR = "An unexpected error occurred"


def validate_search_input(text) -> str:
    """
    Clean a free-text search query.

    Args:
        text: Raw query from the user

    Returns:
        Query cut to MAX_QUERY_LENGTH, unsafe characters removed,
        whitespace trimmed and collapsed ("" for non-strings)
    """
    if not text or not isinstance(text, str):
        return ""

    sanitized = _UNSAFE_CHARS.sub("", text[:MAX_QUERY_LENGTH])
    return re.sub(r"\s+", " ", sanitized.strip())


def validate_perfume_id(perfume_id) -> bool:
    if not perfume_id or not isinstance(perfume_id, str):
        return False
    return bool(_PERFUME_ID.match(perfume_id))


def validate_category(category) -> bool:
    if not isinstance(category, str):
        return False
    return category.lower() in VALID_CATEGORIES


def sanitize_error_message(error) -> str:
    """
    Turn an exception into a message safe to show to the user.

    Stack traces, filesystem paths and localhost ports are stripped; common
    HTTP and network failures get a fixed wording.
    """
    if not error or not isinstance(error, BaseException):
        return GENERIC_ERROR

    message = str(error)
    first_line = message.split("\n")[0]
    cleaned = _LOCALHOST.sub("[server]", _PATH.sub("[path]", first_line))

    if "HTTP 404" in message:
        return "The requested resource was not found"
    if "HTTP 500" in message:
        return "Server error occurred. Please try again later"
    if "HTTP 403" in message:
        return "Access denied"
    if "Network" in message or "fetch" in message:
        return "Network error. Please check your connection"

    return cleaned or "An error occurred"
