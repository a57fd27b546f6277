import os

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")

    # Database: use DATABASE_URL from environment (PostgreSQL in production), fallback to SQLite for local dev
    _db_url = os.environ.get("DATABASE_URL", f"sqlite:///{os.path.join(basedir, 'instance', 'esg_readiness.db')}")
    # Hosted providers give postgres:// but SQLAlchemy requires postgresql://
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

    # Substituted when a company's employee count is missing or not positive
    ESG_FALLBACK_EMPLOYEE_COUNT = int(os.environ.get("ESG_FALLBACK_EMPLOYEE_COUNT", "100"))
    # Evidence expiring within this many days gets a renewal task
    ESG_EVIDENCE_EXPIRY_DAYS = int(os.environ.get("ESG_EVIDENCE_EXPIRY_DAYS", "30"))

    JSON_SORT_KEYS = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
