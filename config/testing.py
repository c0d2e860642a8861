SECRET_KEY = "test-secret"

DB_CONFIG = {
    "engine": "sqlite",
    "path": ":memory:",
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = True

LOG_LEVEL = "WARNING"
LOG_FILE = ""

LOCAL_TIMEZONE = ""
