import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "change-me"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "retail_attendance")
    DB_CONNECT_TIMEOUT = int(os.environ.get("DB_CONNECT_TIMEOUT", "10"))

    # Penalty policies and ledgers are kept per store line (tenant)
    TENANT = os.environ.get("TENANT", "default")

    AUTO_CHECKOUT_TIME = os.environ.get("AUTO_CHECKOUT_TIME", "22:00")

    PERSISTENCE_RETRIES = int(os.environ.get("PERSISTENCE_RETRIES", "3"))
    PERSISTENCE_RETRY_DELAY = float(os.environ.get("PERSISTENCE_RETRY_DELAY", "0.2"))
    LOCK_TIMEOUT_SECONDS = float(os.environ.get("LOCK_TIMEOUT_SECONDS", "5"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    AUTO_INIT_DB = bool(int(os.environ.get("AUTO_INIT_DB", "0")))


def db_config() -> dict:
    return {
        "host": Config.DB_HOST,
        "port": Config.DB_PORT,
        "user": Config.DB_USER,
        "password": Config.DB_PASSWORD,
        "database": Config.DB_NAME,
        "connection_timeout": Config.DB_CONNECT_TIMEOUT,
    }
