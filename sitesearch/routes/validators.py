"""Lightweight request validation helpers."""

from typing import Any, Dict, List, Optional, Tuple

from ..search.models import SearchFilters

Rule = Tuple[str, type, Optional[int]]

# Pagination limits
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_OFFSET = 10000


def validate_fields(payload: Dict[str, Any], rules: List[Rule]) -> Optional[str]:
    """
    Validate required fields with optional max length.

    Args:
        payload: Incoming JSON dict.
        rules: List of (field, type, max_length or None).

    Returns:
        None if valid, or error message string.
    """
    for field, expected_type, max_len in rules:
        if field not in payload or payload.get(field) in (None, ''):
            return f"Missing required field: {field}"
        value = payload.get(field)
        if not isinstance(value, expected_type):
            return f"Field '{field}' must be {expected_type.__name__}"
        if max_len is not None and len(str(value)) > max_len:
            return f"Field '{field}' exceeds max length {max_len}"
    return None


def validate_pagination(limit: Any = None, offset: Any = None,
                        max_limit: int = MAX_LIMIT) -> Tuple[int, int, Optional[str]]:
    """
    Validate and sanitize limit/offset parameters.

    Args:
        limit: Page size (capped at max_limit)
        offset: Index of the first result (must not be negative)
        max_limit: Upper bound for limit

    Returns:
        Tuple of (sanitized_limit, sanitized_offset, error_or_none)
    """
    try:
        limit_int = int(limit) if limit not in (None, '') else DEFAULT_LIMIT
    except (ValueError, TypeError):
        return DEFAULT_LIMIT, 0, "Invalid limit"

    if limit_int < 1:
        limit_int = DEFAULT_LIMIT
    elif limit_int > max_limit:
        limit_int = max_limit  # Cap at max instead of error

    try:
        offset_int = int(offset) if offset not in (None, '') else 0
    except (ValueError, TypeError):
        return limit_int, 0, "Invalid offset"

    if offset_int < 0:
        return limit_int, 0, "Offset must not be negative"
    if offset_int > MAX_OFFSET:
        return limit_int, 0, f"Offset exceeds maximum ({MAX_OFFSET})"

    return limit_int, offset_int, None


def parse_filters(args: Dict[str, Any]) -> Tuple[SearchFilters, Optional[str]]:
    """
    Build SearchFilters from query-string arguments.

    Returns:
        Tuple of (filters, error_or_none); defaults are returned on error
    """
    try:
        return SearchFilters.from_dict({
            'type': args.get('type'),
            'timeRange': args.get('timeRange'),
            'sortBy': args.get('sortBy'),
        }), None
    except ValueError as e:
        return SearchFilters(), f"Invalid filter value: {e}"


def sanitize_string(value: str, max_length: int = 500, allow_newlines: bool = False) -> str:
    """
    Sanitize a string by removing control characters and limiting length.

    Args:
        value: String to sanitize
        max_length: Maximum allowed length
        allow_newlines: Whether to allow newlines

    Returns:
        Sanitized string
    """
    if not isinstance(value, str):
        return ""

    # Remove control characters (except newlines if allowed)
    if allow_newlines:
        result = ''.join(c for c in value if c >= ' ' or c in '\n\r\t')
    else:
        result = ''.join(c for c in value if c >= ' ')

    # Limit length
    return result[:max_length]
