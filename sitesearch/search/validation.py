"""Search query validation and sanitisation."""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import InvalidQueryError

MAX_QUERY_LENGTH = 200
MAX_SUGGESTION_LENGTH = 50
MAX_HISTORY_ITEMS = 10

DANGEROUS_PATTERNS = [
    re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"expression\s*\(", re.IGNORECASE),
]

SQL_INJECTION_PATTERNS = [
    re.compile(r"\b(SELECT|INSERT|UPDATE|DELETE|DROP|CREATE|ALTER|EXEC|UNION)\b", re.IGNORECASE),
    re.compile(r"\b(OR|AND)\s+\d+\s*=\s*\d+", re.IGNORECASE),
    re.compile(r"('|(\\x27)|(\\x2D\\x2D)|(%27)|(%2D%2D))", re.IGNORECASE),
]

SPAM_PATTERNS = [
    re.compile(r"(.)\1{10,}"),  # same character more than 10 times
    re.compile(r"\s{5,}"),
]

CODE_PATTERNS = [
    re.compile(r"function\s*\("),
    re.compile(r"\$\{.*\}"),
    re.compile(r"\beval\s*\("),
    re.compile(r"\bdocument\."),
    re.compile(r"\bwindow\."),
]

HTML_TAG = re.compile(r"<[^>]*>")
WHITESPACE = re.compile(r"\s+")
# CJK ideographs, word characters, whitespace and common punctuation
DISALLOWED_CHARS = re.compile(r"[^\u4e00-\u9fff\u3400-\u4dbf\w\s.,!?;:()\-+@#$%&*]")
SPECIAL_CHARS = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?~`]")
DIGITS_AND_SYMBOLS = re.compile(r"^[\d\W]+$")


@dataclass
class ValidationResult:
    is_valid: bool
    cleaned_query: str
    errors: List[str] = field(default_factory=list)


def validate_search_query(query: Optional[str]) -> ValidationResult:
    """
    Validate and clean a raw search query.

    Unsafe fragments are stripped rather than rejected; the query is only
    invalid when nothing usable remains.
    """
    if not query or not isinstance(query, str):
        return ValidationResult(False, "", ["Search query must not be empty"])

    errors: List[str] = []
    cleaned = query

    if len(query) > MAX_QUERY_LENGTH:
        errors.append(f"Search query is too long, keep it under {MAX_QUERY_LENGTH} characters")
        cleaned = query[:MAX_QUERY_LENGTH]

    if not query.strip():
        return ValidationResult(False, "", ["Search query must not be empty"])

    for pattern in DANGEROUS_PATTERNS:
        if pattern.search(cleaned):
            errors.append("Search query contains unsafe content")
            cleaned = pattern.sub("", cleaned)

    for pattern in SQL_INJECTION_PATTERNS:
        if pattern.search(cleaned):
            errors.append("Search query contains unsafe characters")
            cleaned = pattern.sub("", cleaned)

    for pattern in SPAM_PATTERNS:
        cleaned = pattern.sub(" ", cleaned)

    cleaned = HTML_TAG.sub("", cleaned)
    cleaned = WHITESPACE.sub(" ", cleaned).strip()
    cleaned = DISALLOWED_CHARS.sub("", cleaned)

    if not cleaned:
        return ValidationResult(False, "", ["Search query is not valid"])

    return ValidationResult(True, cleaned, errors)


def require_valid_query(query: Optional[str]) -> str:
    """
    Return the cleaned query.

    Raises:
        InvalidQueryError: Nothing usable remains after cleaning
    """
    result = validate_search_query(query)
    if not result.is_valid:
        raise InvalidQueryError(result.errors)
    return result.cleaned_query


def is_suspicious_query(query: Optional[str]) -> bool:
    """Heuristic check for queries that look like injected code rather than searches."""
    if not query or not isinstance(query, str):
        return False

    special_count = len(SPECIAL_CHARS.findall(query))
    if special_count > len(query) * 0.3:
        return True

    if DIGITS_AND_SYMBOLS.match(query) and len(query) > 10:
        return True

    return any(pattern.search(query) for pattern in CODE_PATTERNS)


def sanitize_search_suggestion(suggestion: Optional[str]) -> str:
    if not suggestion or not isinstance(suggestion, str):
        return ""
    cleaned = HTML_TAG.sub("", suggestion)
    cleaned = WHITESPACE.sub(" ", cleaned).strip()
    if len(cleaned) > MAX_SUGGESTION_LENGTH:
        cleaned = cleaned[:MAX_SUGGESTION_LENGTH] + "..."
    return cleaned


def sanitize_search_history(history: List[str]) -> List[str]:
    """Validate, de-duplicate (first occurrence wins) and cap a history list."""
    cleaned: List[str] = []
    for item in history:
        result = validate_search_query(item)
        if result.is_valid and result.cleaned_query not in cleaned:
            cleaned.append(result.cleaned_query)
    return cleaned[:MAX_HISTORY_ITEMS]
