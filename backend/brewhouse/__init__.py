# backend/brewhouse/__init__.py
from __future__ import annotations

from flask import Flask

from .config import Config
from .extensions import db, migrate


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.beers import beers_bp
    from .routes.customers import customers_bp
    from .routes.orders import beer_orders_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(beers_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(beer_orders_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
