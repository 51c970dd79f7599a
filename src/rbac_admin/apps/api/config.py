import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    JWT_SECRET_KEY = os.environ["SECRET_KEY"]
    ALGORITHM = os.environ.get("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60))
    API_PREFIX = os.environ.get("API_PREFIX", "/v1")
    DEFAULT_GUARD_NAME = os.environ.get("DEFAULT_GUARD_NAME", "web")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    HUMANIZE_LOGS = os.environ.get("HUMANIZE_LOGS", "false").lower() in ("1", "true", "yes")


settings = Settings()
