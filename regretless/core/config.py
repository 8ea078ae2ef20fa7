from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./regretless.db"
    APP_ENV: str = "development"
    SECRET_KEY: str = "changeme-secret-key"
    LOG_LEVEL: str = "INFO"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://regretless.app,https://api.regretless.app"
    CORS_ORIGINS: str = "*"

    # Identity is resolved by the gateway in front of the API and forwarded
    # in this header.
    USER_ID_HEADER: str = "X-User-Id"

    # Local blob storage for profile pictures.
    BLOB_ROOT: str = "./blobs"
    BLOB_BASE_URL: str = "/blobs"
    MAX_AVATAR_BYTES: int = 2 * 1024 * 1024

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
