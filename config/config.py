"""Environment readers and the break/attendance settings shared by every environment."""

import os


def env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def env_flag(name: str, default: bool) -> bool:
    return bool(int(os.getenv(name, "1" if default else "0")))


def db_config(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": env_int("DB_PORT", 3306),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "timekeeping_db"),
    }


# Break allowances, in minutes
BREAK_LUNCH_LIMIT_MINUTES = env_int("BREAK_LUNCH_LIMIT_MINUTES", 60)
BREAK_OTHER_LIMIT_MINUTES = env_int("BREAK_OTHER_LIMIT_MINUTES", 15)
BREAK_OTHER_WARNING_MINUTES = env_int("BREAK_OTHER_WARNING_MINUTES", 20)

# "literal" or "tiered"
BREAK_CLASSIFICATION = os.getenv("BREAK_CLASSIFICATION", "literal").lower()

REQUIRED_DAILY_HOURS = env_float("REQUIRED_DAILY_HOURS", 8)
LIVE_TICK_SECONDS = env_float("LIVE_TICK_SECONDS", 1.0)
