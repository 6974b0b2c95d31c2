SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "holitime_test",
}

SQLALCHEMY_DATABASE_URI = "sqlite://"

DEBUG = False
TESTING = True

SESSION_DAYS = 1

LOG_LEVEL = "WARNING"
LOG_FILE = None

AUTO_INIT_DB = True
AUTO_SEED_DB = False
