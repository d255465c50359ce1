# app.py
"""
Flask application factory for the contact form mail relay

The factory wires:
- Immutable configuration loaded once from the environment
- Logging to stderr, with an optional rotating log file
- The /contact blueprint and its two-email relay
- Plain-text error handling and security headers
- A liveness endpoint for load balancers
"""

import sys
import time
import logging
import logging.handlers
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, request, jsonify, g
from werkzeug.exceptions import HTTPException

from api.contact import contact_bp
from api.responses import plain_text
from config.settings import ContactConfig
from core.exceptions import ConfigurationError
from core.mail_dispatcher import MailDispatcher
from middleware.security import security_headers
from services.contact_relay import ContactRelay

__version__ = '1.0.0'

LOG_HANDLER_NAME = 'form2mail'
SLOW_REQUEST_THRESHOLD_MS = 5000


def setup_logging(app: Flask, config: ContactConfig) -> None:
    """
    Configure process logging

    Module loggers propagate to the root logger, which gets one stderr
    handler and, when LOG_FILE is set, a rotating file handler. Handlers
    installed by an earlier call are replaced, not duplicated.
    """
    # Remove default Flask handlers to avoid duplicate logs
    app.logger.handlers.clear()

    formatter = logging.Formatter(
        fmt='%(asctime)s %(name)s[%(process)d]: %(levelname)s %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    log_level = getattr(logging, config.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == LOG_HANDLER_NAME:
            root.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.set_name(LOG_HANDLER_NAME)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if config.log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            config.log_file,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.set_name(LOG_HANDLER_NAME)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(log_level)

    # Suppress verbose third-party logs in production
    if not app.debug:
        logging.getLogger('werkzeug').setLevel(logging.WARNING)


def register_blueprints(app: Flask) -> None:
    app.register_blueprint(contact_bp)


def configure_error_handlers(app: Flask) -> None:
    """
    Plain-text error responses; no internal detail reaches the client
    """
    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return plain_text(error.name, error.code)

    @app.errorhandler(Exception)
    def handle_exception(error):
        app.logger.error(f"Unhandled exception on {request.method} {request.path}: {error}",
                         exc_info=True)
        return plain_text('Internal Server Error', 500)


def configure_health_checks(app: Flask) -> None:
    @app.route('/health')
    def health_check():
        """Basic health check endpoint"""
        return jsonify({
            'status': 'healthy',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'version': __version__
        })


def configure_request_middleware(app: Flask) -> None:
    @app.before_request
    def before_request():
        g.start_time = time.perf_counter()

    @app.after_request
    def after_request(response):
        response = security_headers(response)

        if hasattr(g, 'start_time'):
            duration = (time.perf_counter() - g.start_time) * 1000
            if duration > SLOW_REQUEST_THRESHOLD_MS:
                app.logger.warning(f"Slow request ({duration:.0f}ms): {request.method} {request.path}")
            else:
                app.logger.info(f"{request.method} {request.path} {response.status_code} ({duration:.0f}ms)")

        return response


def create_app(config: Optional[ContactConfig] = None,
               mail_dispatcher: Optional[MailDispatcher] = None,
               testing: bool = False) -> Flask:
    """
    Flask application factory

    Args:
        config: Settings to use; read from the environment when omitted
        mail_dispatcher: Replacement for the SMTP dispatcher (tests)
        testing: Enable Flask testing mode

    Returns:
        Configured Flask application instance

    Raises:
        ConfigurationError: if the mail configuration is unusable
    """
    config = config or ContactConfig.from_env()
    config.validate()

    app = Flask(__name__)
    app.config.update({
        'TESTING': testing,
        'MAX_CONTENT_LENGTH': config.max_content_length,
        'VERSION': __version__,
    })
    app.json.sort_keys = False

    setup_logging(app, config)

    app.contact_config = config
    app.contact_relay = ContactRelay(mail_dispatcher or MailDispatcher(config), config)

    register_blueprints(app)
    configure_error_handlers(app)
    configure_health_checks(app)
    configure_request_middleware(app)

    app.logger.info(f"Contact relay ready: {config.smtp_host}:{config.smtp_port} -> {config.recipient_email}")
    return app


def main() -> int:
    try:
        app = create_app()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO)
        logging.getLogger(__name__).critical(str(e))
        return 1

    app.logger.info(f"Server starting on port {app.contact_config.server_port}...")
    app.run(host='0.0.0.0', port=app.contact_config.server_port)
    return 0


if __name__ == '__main__':
    sys.exit(main())
