# Load environment variables FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import time
import uuid
from flask import Flask, g, jsonify, request


def create_app(config=None):
    """Create and configure an instance of the Flask application."""
    from .config import Config
    from .extensions import EXTENSION_KEY, build_services
    from .log import debug_log_event, log
    from .rate_limit import init_rate_limiting
    from .routes import search_bp

    config = config or Config.from_env()

    app = Flask(__name__, instance_relative_config=True)

    # =============================================================================
    # CONFIGURATION
    # =============================================================================
    app.config.from_mapping(
        HOST=config.host,
        PORT=config.port,
        DEBUG=config.debug,
        SEARCH_RATE_LIMIT=config.search_rate_limit,
        RATELIMIT_STORAGE_URI=config.rate_limit_storage_uri,
        DISABLE_RATE_LIMITING=config.disable_rate_limiting,
    )
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    init_rate_limiting(app)

    # =============================================================================
    # REQUEST LOGGING
    # =============================================================================
    @app.before_request
    def assign_request_id():
        g.request_id = uuid.uuid4().hex[:12]
        g.request_start = time.time()

    @app.after_request
    def debug_request_log(response):
        duration_ms = None
        start_time = getattr(g, 'request_start', None)
        if start_time:
            duration_ms = int((time.time() - start_time) * 1000)
        debug_log_event({
            'ts': time.strftime('%Y-%m-%dT%H:%M:%S'),
            'request_id': getattr(g, 'request_id', None),
            'method': request.method,
            'path': request.path,
            'query': request.query_string.decode('utf-8', errors='ignore'),
            'status': response.status_code,
            'duration_ms': duration_ms,
            'remote_addr': request.remote_addr,
        })
        return response

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found', 'code': 'not_found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        log(f"❌ Unhandled error on {request.path}: {error}")
        return jsonify({'error': 'Search service temporarily unavailable', 'code': 'internal_error'}), 500

    # =============================================================================
    # SEARCH SERVICES
    # =============================================================================
    services = build_services(config)
    app.extensions[EXTENSION_KEY] = services

    # =============================================================================
    # BLUEPRINTS
    # =============================================================================
    app.register_blueprint(search_bp)

    log(f"🔍 Search ready: {len(services.index)} documents, "
        f"store={config.persistent_store}, rate limit={config.search_rate_limit}")

    return app
