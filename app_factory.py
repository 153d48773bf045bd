"""
Flask Application Factory
Creates and configures the Flask application with all necessary components.
"""

import atexit
import logging
from datetime import datetime

import pytz
from flask import Flask, jsonify
from flask_cors import CORS

from config import Config, get_config
from hf_propagation import HFPropagationAnalyzer
from utils.logging_config import setup_logging
from routes.api import api_bp, cache

# Configure logging
setup_logging()
logger = logging.getLogger(__name__)


def create_app(config_class=Config, analyzer=None):
    """
    Create and configure the Flask application.

    Args:
        config_class: Config class or environment name ('development', 'testing', ...)
        analyzer: Pre-built dashboard session; one is built from the config when omitted
    """
    if isinstance(config_class, str):
        config_class = get_config(config_class)

    app = Flask(__name__)
    app.config.from_object(config_class)

    logger.info(f"Initializing services ({'production' if config_class.is_production() else 'non-production'} mode)...")

    for error in config_class.validate():
        logger.warning(f"Configuration: {error}")

    # Initialize CORS
    CORS(app)

    # Initialize cache
    cache.init_app(app)

    # Initialize services
    app.config['HF_ANALYZER'] = initialize_analyzer(app, config_class, analyzer)

    # Register blueprints
    register_blueprints(app)

    # Register routes
    register_routes(app)

    logger.info("Application created successfully")
    return app


def initialize_analyzer(app, config_class, analyzer=None):
    """Build (or adopt) the dashboard session and start it."""
    if analyzer is None:
        try:
            analyzer = HFPropagationAnalyzer(config=config_class)
        except Exception as e:
            logger.error(f"Failed to initialize HFPropagationAnalyzer: {e}")
            raise

        # Tests drive refreshes explicitly
        analyzer.init(initial_refresh=not app.config.get('TESTING'))
        atexit.register(analyzer.dispose)

    logger.info("HFPropagationAnalyzer initialized")
    return analyzer


def register_blueprints(app):
    """Register Flask blueprints."""
    app.register_blueprint(api_bp, url_prefix='/api')
    logger.info("Blueprints registered")


def register_routes(app):
    """Register application routes."""
    @app.route('/')
    def index():
        """Service summary."""
        analyzer = app.config.get('HF_ANALYZER')
        tz = pytz.timezone(app.config.get('TIMEZONE', 'UTC'))

        return jsonify({
            'service': 'hf-propagation-dashboard',
            'status': 'ok' if analyzer and not analyzer.disposed else 'unavailable',
            'time': datetime.now(tz).isoformat(),
            'band': analyzer.selected_band if analyzer else None,
            'autoRefresh': analyzer.auto_refresh if analyzer else None,
            'tasks': analyzer.task_manager.get_status() if analyzer else None,
            'storage': analyzer.state_store.get_stats() if analyzer and not analyzer.disposed else None,
        })

    logger.info("Routes registered")
