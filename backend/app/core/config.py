from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    ENV: str = "prod"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str

    JWT_SECRET: str
    JWT_ACCESS_MINUTES: int = 60

    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT_SECONDS: int = 30
    DB_POOL_RECYCLE_SECONDS: int = 1800

    # Bounded waits for the rank sweep critical section
    DB_LOCK_TIMEOUT_MS: int = 5000
    RANK_LOCK_TIMEOUT_SECONDS: float = 10.0

    API_PREFIX: str = ""
    API_WORKERS: int = 2
    ALLOWED_HOSTS: str = "localhost,127.0.0.1"
    CORS_ORIGINS: str = "*"
    SECURITY_HEADERS_ENABLED: bool = True

    # Prediction collaborator (provider-agnostic)
    PREDICTION_PROVIDER: str = "none"  # none|http
    PREDICTION_ENDPOINT_URL: str | None = None
    PREDICTION_API_KEY: str | None = None
    PREDICTION_TIMEOUT_SECONDS: int = 20

settings = Settings()
