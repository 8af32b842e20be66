from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    # 'development' or 'production'
    ENVIRONMENT: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    DATABASE_URL: str = "sqlite:///./campus_events.db"
    DB_NAME: str | None = None
    DB_CONNECT_TIMEOUT: int = 5

    # No default: the service refuses to start without a signing secret.
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_HOURS: int = 24

    REDIS_URL: str = "redis://localhost:6379/0"
    REGISTRATION_LOCK_TIMEOUT: int = 10
    REGISTRATION_LOCK_WAIT: int = 5

    CORS_ORIGIN: str = "http://localhost:5173,http://localhost:3000,http://localhost:80"

    DEFAULT_ADMIN_EMAIL: str = "admin@eventsphere.edu"
    DEFAULT_ADMIN_PASSWORD: str = "Admin@1234"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGIN.split(",") if origin.strip()]


settings = Settings()
