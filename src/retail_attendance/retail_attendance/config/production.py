import os

from .base import Config, db_config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config()

TENANT = Config.TENANT
AUTO_CHECKOUT_TIME = Config.AUTO_CHECKOUT_TIME
PERSISTENCE_RETRIES = Config.PERSISTENCE_RETRIES
PERSISTENCE_RETRY_DELAY = Config.PERSISTENCE_RETRY_DELAY
LOCK_TIMEOUT_SECONDS = Config.LOCK_TIMEOUT_SECONDS

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = Config.AUTO_INIT_DB
