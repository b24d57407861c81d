"""Flask application factory for OutagePulse."""

from flask import Flask
from typing import Optional
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from .config import Config, load_config
from .cycle import CycleRunner
from .api.routes import api_v1, RUNNER_EXTENSION
from .api.errors import register_error_handlers


def create_app(
    test_config: Optional[dict] = None,
    runner: Optional[CycleRunner] = None,
    config: Optional[Config] = None
) -> Flask:
    """Create and configure the OutagePulse Flask application.

    Args:
        test_config: Optional test configuration dict
        runner: Pre-built cycle runner (built from config if None)
        config: Runtime configuration (loaded from env if None)

    Returns:
        Configured Flask application
    """
    app = Flask(__name__, instance_relative_config=True)

    app.config.from_mapping(
        SECRET_KEY='dev',
        MAX_CONTENT_LENGTH=16 * 1024,  # 16KB max request size
    )

    if test_config:
        app.config.update(test_config)

    if runner is None:
        runner = CycleRunner.from_config(config or load_config())
    app.extensions[RUNNER_EXTENSION] = runner

    app.register_blueprint(api_v1)

    # Rate limiting (disabled in testing mode unless explicitly enabled)
    if not test_config or test_config.get('RATELIMIT_ENABLED', True):
        api_config = runner.config.api
        storage_uri = test_config.get('RATELIMIT_STORAGE_URI', "memory://") if test_config else "memory://"
        limiter = Limiter(
            key_func=get_remote_address,
            app=app,
            default_limits=[api_config.rate_limit_get],
            storage_uri=storage_uri,
            strategy="fixed-window",
            headers_enabled=True,
        )
        app.view_functions['api_v1.run_cycle'] = limiter.limit(
            api_config.rate_limit_cycle
        )(app.view_functions['api_v1.run_cycle'])

    register_error_handlers(app)

    # Health check at root (Flask-specific)
    @app.route('/health')
    def root_health():
        return {'status': 'healthy'}, 200

    return app
