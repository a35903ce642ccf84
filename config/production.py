import os

from .config import *  # noqa: F401,F403
from .config import db_config, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config()

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", False)
