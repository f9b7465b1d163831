"""
Rate limiting for the search API.

Uses Flask-Limiter to protect the search endpoints from abuse.

Rate Limit Tiers:
- Search: /api/search (scoring the whole index per request)
- Light: suggestions, analytics and stats (cheap operations)
"""

import os
from flask import current_app, request, jsonify
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize limiter (will be attached to app in create_app)
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000 per day", "200 per hour"],
    storage_uri=os.environ.get("RATELIMIT_STORAGE_URI", "memory://"),
    strategy="fixed-window",
    headers_enabled=True,  # Add X-RateLimit-* headers to responses
)


# ==============================================================================
# RATE LIMIT TIERS
# ==============================================================================

DEFAULT_SEARCH_LIMIT = "20 per minute"

# Light operations - fast reads
LIGHT_LIMIT = "120 per minute"


def _search_limit() -> str:
    """Search tier, configurable through SEARCH_RATE_LIMIT."""
    return current_app.config.get('SEARCH_RATE_LIMIT') or DEFAULT_SEARCH_LIMIT


# ==============================================================================
# RATE LIMIT DECORATORS
# ==============================================================================

def limit_search(f):
    """Apply the search rate limit."""
    return limiter.limit(_search_limit)(f)


def limit_light(f):
    """Apply light rate limit to cheap operations."""
    return limiter.limit(LIGHT_LIMIT)(f)


# ==============================================================================
# ERROR HANDLER
# ==============================================================================

def rate_limit_exceeded_handler(e):
    """Return the JSON error body used by every search endpoint."""
    retry_after = getattr(e, 'retry_after', None) or 60
    response = jsonify({
        "error": "Too many search requests, please try again later",
        "code": "rate_limited",
        "message": str(e.description),
        "retry_after": retry_after,
        "path": request.path,
    })
    response.status_code = 429
    response.headers['Retry-After'] = str(retry_after)
    return response


# ==============================================================================
# INITIALIZATION
# ==============================================================================

def init_rate_limiting(app):
    """
    Initialize rate limiting for a Flask app.

    Call this in create_app() after app configuration.
    """
    limiter.init_app(app)

    # Register custom error handler
    app.errorhandler(429)(rate_limit_exceeded_handler)

    limiter.enabled = not app.config.get('DISABLE_RATE_LIMITING')

    return limiter
