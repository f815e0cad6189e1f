import os

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")

    # Database: use DATABASE_URL from environment (PostgreSQL on Render), fallback to SQLite for local dev
    _db_url = os.environ.get("DATABASE_URL", f"sqlite:///{os.path.join(basedir, 'instance', 'materiality.db')}")
    # Render/Heroku give postgres:// but SQLAlchemy requires postgresql://
    if _db_url.startswith("postgres://"):
        _db_url = _db_url.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = _db_url
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_size": 5,
        "max_overflow": 10,
    } if "DATABASE_URL" in os.environ else {}

    # Materiality matrix plot area (pixels)
    MATRIX_SIZE = int(os.environ.get("MATRIX_SIZE", 400))
    MATRIX_PADDING = int(os.environ.get("MATRIX_PADDING", 40))

    # Category given to custom topics when the caller names none
    CUSTOM_TOPIC_DEFAULT_CATEGORY = os.environ.get("CUSTOM_TOPIC_DEFAULT_CATEGORY", "governance")

    # In production (Render), these are set via HTTPS proxy
    PREFERRED_URL_SCHEME = "https" if os.environ.get("RENDER", "") else "http"
