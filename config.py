import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _flag(name, default="false"):
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as sportnexus.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "sportnexus.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Data access layer: "sql" (the database above) or "memory"
    DATASTORE_BACKEND = os.getenv("DATASTORE_BACKEND", "sql")
    # Serve catalogue reads from demo data when the database is unreachable
    DATASTORE_READ_FALLBACK = _flag("DATASTORE_READ_FALLBACK", "true")
    # Seed the memory backend with demo venues/equipment/tutorials
    SEED_DEMO_DATA = _flag("SEED_DEMO_DATA", "true")

    # Session cookie name for the identity provider's token
    AUTH_COOKIE_NAME = "sportnexus_session"

    # 8 hours session lifetime
    SESSION_LIFETIME_SECONDS = int(os.getenv("SESSION_LIFETIME_SECONDS", str(8 * 60 * 60)))

    # How many notifications a feed keeps
    NOTIFICATION_FEED_LIMIT = int(os.getenv("NOTIFICATION_FEED_LIMIT", "10"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    DATASTORE_BACKEND = "sql"
    DATASTORE_READ_FALLBACK = False
    SEED_DEMO_DATA = False
    LOG_LEVEL = "DEBUG"
