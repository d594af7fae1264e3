"""
Application settings.
Database and Cognito secrets fall back to AWS Secrets Manager at startup.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # AWS
    AWS_REGION: str = "ap-south-1"
    COGNITO_REGION: str = "ap-south-1"

    # Database (full URL wins; otherwise built from parts, which may come from Secrets Manager)
    DATABASE_URL: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: int = 5432
    DB_NAME: Optional[str] = None
    DB_USER: Optional[str] = None
    DB_PASS: Optional[str] = None

    # Cognito (loaded from Secrets Manager)
    COGNITO_USER_POOL_ID: Optional[str] = None
    COGNITO_CLIENT_ID: Optional[str] = None
    COGNITO_CLIENT_SECRET: Optional[str] = None

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    SESSION_TTL: int = 86400  # 24 hours in seconds

    # Community chat
    MESSAGE_MAX_LENGTH: int = 500
    MESSAGE_RETENTION_DAYS: int = 7
    RETENTION_SWEEP_INTERVAL: int = 3600  # seconds between expiry sweeps
    PRESENCE_SETTLE_DELAY: float = 0.1  # seconds before recounting a room after disconnect

    # Assistant guest throttle
    GUEST_MESSAGE_LIMIT: int = 2
    GUEST_WINDOW_SECONDS: int = 86400

    # Groq (assistant). Without a key the assistant answers with a fixed fallback.
    GROQ_API_KEY: Optional[str] = None
    GROQ_MODEL: str = "llama-3.3-70b-versatile"
    GROQ_API_URL: str = "https://api.groq.com/openai/v1/chat/completions"
    ASSISTANT_TIMEOUT: float = 30.0
    ASSISTANT_MEMORY_MESSAGES: int = 20
    ASSISTANT_MEMORY_TTL: int = 3600

    # Optional
    DEBUG: bool = False
    PROJECT_NAME: str = "DengueSpot Community"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5000"]

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASS}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def use_groq(self) -> bool:
        return bool(self.GROQ_API_KEY)

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()

# Load secrets from AWS Secrets Manager only when DB creds aren't already
# provided via environment variables (e.g. in Docker / local dev / tests).
if not settings.DATABASE_URL and not settings.DB_HOST:
    from app.aws.secrets import get_secret

    _db_secret = get_secret("denguespot/db", region_name=settings.AWS_REGION)
    settings.DB_HOST = _db_secret["host"]
    settings.DB_PORT = int(_db_secret.get("port", 5432))
    settings.DB_NAME = _db_secret["database"]
    settings.DB_USER = _db_secret["username"]
    settings.DB_PASS = _db_secret["password"]

    _cognito_secret = get_secret("denguespot/cognito", region_name=settings.COGNITO_REGION)
    settings.COGNITO_USER_POOL_ID = _cognito_secret["user_pool_id"]
    settings.COGNITO_CLIENT_ID = _cognito_secret["client_id"]
    settings.COGNITO_CLIENT_SECRET = _cognito_secret.get("client_secret")
