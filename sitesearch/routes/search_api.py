"""Site Search API Blueprint.

Serves the local search engine over HTTP, plus popular-query suggestions,
search analytics and cache/performance statistics.
"""
from __future__ import annotations

import time
from typing import Optional

from flask import Blueprint, jsonify, request

from sitesearch.extensions import get_services
from sitesearch.log import log
from sitesearch.rate_limit import limit_light, limit_search
from sitesearch.search.analytics import DEFAULT_PERIOD, PERIODS
from sitesearch.search.cache import make_cache_key
from sitesearch.search.client import result_ttl
from sitesearch.search.errors import InvalidQueryError
from sitesearch.search.validation import MAX_QUERY_LENGTH, is_suspicious_query, require_valid_query
from .validators import parse_filters, sanitize_string, validate_fields, validate_pagination

search_bp = Blueprint('search_api', __name__, url_prefix='/api/search')

SEARCH_CACHE_CONTROL = 'public, max-age=300, stale-while-revalidate=600'
SUGGESTIONS_CACHE_CONTROL = 'public, max-age=600, stale-while-revalidate=1200'
MAX_SUGGESTION_LIMIT = 10
FILTER_ARGS = ('type', 'timeRange', 'sortBy')
ANALYTICS_EVENT_RULES = [
    ('eventType', str, 20),
    ('query', str, MAX_QUERY_LENGTH),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _error(message: str, detail: Optional[str] = None, code: str = 'invalid_request', status: int = 400):
    payload = {'error': message, 'code': code}
    if detail:
        payload['detail'] = detail
    return jsonify(payload), status


def _client_ip() -> str:
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.headers.get('X-Real-IP') or request.remote_addr or 'unknown'


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

@search_bp.route('', methods=['GET'])
@limit_search
def search():
    services = get_services()
    args = request.args

    filters, filter_error = parse_filters(args)
    if filter_error:
        return _error('Invalid search filters', filter_error, code='invalid_filter')

    limit, offset, page_error = validate_pagination(args.get('limit'), args.get('offset'))
    if page_error:
        return _error(page_error, code='invalid_pagination')

    try:
        query = require_valid_query(args.get('q', ''))
    except InvalidQueryError as e:
        return _error(str(e), code='invalid_query')

    if is_suspicious_query(query):
        log(f"⚠️ Suspicious search query from {_client_ip()}: {query!r}")
        return _error('Search query contains unsupported content', code='suspicious_query')

    services.history.add(query)
    if any(name in args for name in FILTER_ARGS):
        services.preferences.save(filters)

    start = time.perf_counter()
    key = make_cache_key(query, {'filters': filters.to_dict(), 'limit': limit, 'offset': offset})
    cached = services.results_cache.get(key)
    if cached is not None:
        result = cached
        services.monitor.record_search((time.perf_counter() - start) * 1000, from_cache=True)
    else:
        result = services.engine.search(query, filters, limit=limit, offset=offset)
        services.results_cache.set(key, result, result_ttl(result))
        services.monitor.record_search((time.perf_counter() - start) * 1000, from_cache=False)

    response = jsonify(result.to_dict())
    response.headers['Cache-Control'] = SEARCH_CACHE_CONTROL
    response.headers['Access-Control-Allow-Origin'] = '*'
    return response


@search_bp.route('/suggestions', methods=['GET'])
@limit_light
def suggestions():
    services = get_services()
    query = sanitize_string(request.args.get('q', ''), max_length=100)
    try:
        limit = int(request.args.get('limit') or 5)
    except (TypeError, ValueError):
        return _error('Invalid limit', code='invalid_pagination')
    limit = max(1, min(limit, MAX_SUGGESTION_LIMIT))

    matches = services.suggestions.suggest(query, limit=limit)
    response = jsonify({'suggestions': [s.to_dict() for s in matches]})
    response.headers['Cache-Control'] = SUGGESTIONS_CACHE_CONTROL
    response.headers['Access-Control-Allow-Origin'] = '*'
    return response


# ---------------------------------------------------------------------------
# History & preferences
# ---------------------------------------------------------------------------

@search_bp.route('/history', methods=['GET'])
@limit_light
def get_history():
    return jsonify({'history': get_services().history.list()})


@search_bp.route('/history', methods=['DELETE'])
@limit_light
def clear_history():
    get_services().history.clear()
    return jsonify({'success': True})


@search_bp.route('/preferences', methods=['GET'])
@limit_light
def get_preferences():
    return jsonify(get_services().preferences.load().to_dict())


# ---------------------------------------------------------------------------
# Analytics & stats
# ---------------------------------------------------------------------------

@search_bp.route('/analytics', methods=['POST'])
@limit_light
def record_analytics():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _error('Request body must be a JSON object')

    field_error = validate_fields(payload, ANALYTICS_EVENT_RULES)
    if field_error:
        return _error('Missing or invalid event data', field_error, code='invalid_event')

    try:
        get_services().analytics.record(
            payload,
            ip=_client_ip(),
            userAgent=request.headers.get('User-Agent', ''),
            referer=request.headers.get('Referer'),
        )
    except (TypeError, ValueError) as e:
        return _error('Missing or invalid event data', str(e), code='invalid_event')

    return jsonify({'success': True, 'message': 'Analytics event recorded'})


@search_bp.route('/analytics', methods=['GET'])
@limit_light
def analytics_report():
    analytics = get_services().analytics
    period = request.args.get('period', DEFAULT_PERIOD)
    if period not in PERIODS:
        period = DEFAULT_PERIOD
    fmt = request.args.get('format', 'summary')

    if fmt == 'raw':
        return jsonify({'events': [e.to_dict() for e in analytics.events(period)]})
    if fmt != 'summary':
        return _error('Unknown report format', fmt, code='invalid_format')
    return jsonify(analytics.report(period))


@search_bp.route('/stats', methods=['GET'])
@limit_light
def stats():
    services = get_services()
    return jsonify({
        'performance': services.monitor.get_stats(),
        'resultsCache': services.results_cache.stats(),
        'suggestionCache': services.suggestion_cache.stats(),
        'index': {'documents': len(services.index)},
    })
