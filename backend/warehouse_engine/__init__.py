# backend/warehouse_engine/__init__.py
from flask import Flask

from .config import Config
from .extensions import db, migrate


def engine_options_for(database_uri: str, timeout_seconds: int, base_options: dict | None = None) -> dict:
    """
    Engine options that bound every lock wait and statement by timeout_seconds.

    SQLite takes it as the driver busy timeout. PostgreSQL gets lock_timeout
    and statement_timeout per connection, so a blocked SELECT ... FOR UPDATE
    fails with OperationalError and the transaction is rolled back. MySQL gets
    innodb_lock_wait_timeout through init_command.
    """
    options = dict(base_options or {})
    if database_uri.startswith("sqlite"):
        options.setdefault("connect_args", {"timeout": timeout_seconds})
        return options

    options.setdefault("pool_timeout", timeout_seconds)
    options.setdefault("pool_pre_ping", True)
    timeout_ms = int(timeout_seconds * 1000)
    if database_uri.startswith("postgres"):
        options.setdefault(
            "connect_args",
            {"options": f"-c lock_timeout={timeout_ms} -c statement_timeout={timeout_ms}"},
        )
    elif database_uri.startswith("mysql"):
        options.setdefault(
            "connect_args",
            {"init_command": f"SET SESSION innodb_lock_wait_timeout={max(1, int(timeout_seconds))}"},
        )
    return options


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options_for(
        app.config["SQLALCHEMY_DATABASE_URI"],
        app.config["TRANSACTION_TIMEOUT_SECONDS"],
        app.config.get("SQLALCHEMY_ENGINE_OPTIONS"),
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.listings import listings_bp
    from .routes.inventory import inventory_bp
    from .routes.warehouses import warehouses_bp
    from .routes.settlements import settlements_bp
    from .routes.ledger import ledger_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(listings_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(warehouses_bp)
    app.register_blueprint(settlements_bp)
    app.register_blueprint(ledger_bp)
    app.register_blueprint(reports_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
