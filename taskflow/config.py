
import os
from functools import lru_cache


class Settings:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskflow_prod.sqlite")
    SECRET_KEY = os.getenv("SECRET_KEY", "SUPER_SECRET_KEY_CHANGE_IN_PRODUCTION")
    ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "10080"))  # 7 days
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")

    APP_NAME = "Taskflow API"
    APP_VERSION = "1.0.0"
    DEBUG = False

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

    SEED_DEFAULT_DATA = os.getenv("SEED_DEFAULT_DATA", "true").lower() == "true"


class DevSettings(Settings):
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskflow_dev.sqlite")
    DEBUG = True


class TestSettings(Settings):
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskflow_test.sqlite")
    DEBUG = True


@lru_cache
def get_settings():
    env = os.getenv("ENV", "dev")
    if env == "test":
        return TestSettings()
    if env == "dev":
        return DevSettings()
    return Settings()
