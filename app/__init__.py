import atexit
import os
from flask import Flask, jsonify
from sqlalchemy import event
from .extensions import db, jwt, cors, migrate
from .config import Config


def _use_immediate_transactions(engine):
    # pysqlite defers its own BEGIN; emit BEGIN IMMEDIATE so concurrent
    # writers queue on the busy timeout instead of failing on lock upgrade
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def _dispose_pool(app):
    with app.app_context():
        db.engine.dispose()


def create_app(config=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    os.makedirs(app.instance_path, exist_ok=True)
    Config.init_app(app)
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/*": {"origins": "*"}})
    migrate.init_app(app, db)

    from .errors import register_error_handlers; register_error_handlers(app)
    from .utils.decorators import register_jwt_handlers; register_jwt_handlers(jwt)

    # Register blueprints
    from .checkout import bp as checkout_bp; app.register_blueprint(checkout_bp)
    from .cart import bp as cart_bp; app.register_blueprint(cart_bp)
    from .order import bp as order_bp; app.register_blueprint(order_bp)
    from .users import bp as users_bp; app.register_blueprint(users_bp)

    from .cli import register_cli; register_cli(app)

    @app.get("/")
    def health():
        return jsonify(ok=True, msg="API running")

    with app.app_context():
        from . import model  # noqa: F401  register tables
        if db.engine.dialect.name == "sqlite":
            _use_immediate_transactions(db.engine)
        db.create_all()

    atexit.register(_dispose_pool, app)
    return app
