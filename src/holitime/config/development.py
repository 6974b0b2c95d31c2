import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "holitime"),
}

# Full SQLAlchemy URL, wins over DB_CONFIG when set (e.g. sqlite:///holitime.db)
SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")

DEBUG = True

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE")

# If enabled, app will create missing tables on startup
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
