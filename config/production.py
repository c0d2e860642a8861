import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "engine": os.getenv("DB_ENGINE", "sqlite"),
    "path": os.getenv("CAMP_WATCH_DB", os.path.join("instance", "camp_watch.db")),
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "camp_watch"),
}

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", os.path.join("logs", "camp_watch.log"))

LOCAL_TIMEZONE = os.getenv("LOCAL_TIMEZONE", "")
