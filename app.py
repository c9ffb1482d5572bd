"""
Keyhold identity service entry point.

Builds the Flask app, selects the storage backend once from STORAGE_URI and
injects it into the IdentityService used by the routes.
"""

import logging
import os
from typing import Optional

from flask import Flask
from config import Config, get_config
from routes.user_routes import user_bp
from services.identity_service import IdentityService
from storage.factory import select_store
from storage.store import KeyValueStore


def create_app(config_class: Optional[type[Config]] = None, store: Optional[KeyValueStore] = None) -> Flask:
    """
    Create the Flask application.

    Args:
        config_class: Configuration class; defaults to the FLASK_ENV selection
        store: Pre-built store, mainly for tests; built from STORAGE_URI otherwise

    Returns:
        Flask: The configured application
    """
    if config_class is None:
        config_class = get_config()

    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=getattr(logging, config_class.LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if store is None:
        store = select_store(app.config['STORAGE_URI'])
    app.extensions['identity_service'] = IdentityService(store)
    logging.info("Keyhold starting (env: %s, store: %r)", os.environ.get('FLASK_ENV', 'development'), store)

    app.register_blueprint(user_bp)

    @app.route("/health_check")
    def health_check():
        return "Success"

    return app


# This block allows the app to be run directly for development purposes
if __name__ == "__main__":
    config_class = get_config()
    app = create_app(config_class)
    app.run(host=config_class.HOST, port=config_class.PORT)
