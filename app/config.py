import os
from datetime import timedelta


def _env_bool(name, default=False):
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=1)

    # connection pool
    DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
    DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
    CHECKOUT_STATEMENT_TIMEOUT_MS = int(os.getenv("CHECKOUT_STATEMENT_TIMEOUT_MS", "10000"))

    # mail: "console" logs, "smtp" sends, "memory" keeps messages for tests
    MAIL_BACKEND = os.getenv("MAIL_BACKEND", "console")
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", True)
    MAIL_SENDER = os.getenv("MAIL_SENDER") or os.getenv("MAIL_USERNAME") or "no-reply@smartcart.local"

    NOTIFICATION_MAX_ATTEMPTS = int(os.getenv("NOTIFICATION_MAX_ATTEMPTS", "3"))
    STORE_URL = os.getenv("STORE_URL", "http://localhost:3000/")

    @staticmethod
    def init_app(app):
        if not app.config.get("SQLALCHEMY_DATABASE_URI"):
            if not os.getenv("DATABASE_URL"):
                os.makedirs(app.instance_path, exist_ok=True)
                app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'app.db')}"
            else:
                app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")

        uri = app.config["SQLALCHEMY_DATABASE_URI"]
        options = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
        # in-memory sqlite runs on a single static connection, no pool to size
        if uri not in ("sqlite://", "sqlite:///:memory:"):
            options.setdefault("pool_size", app.config["DB_POOL_SIZE"])
            options.setdefault("max_overflow", app.config["DB_MAX_OVERFLOW"])
            options.setdefault("pool_timeout", app.config["DB_POOL_TIMEOUT"])
            options.setdefault("pool_pre_ping", True)
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = options
