from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Required from environment (.env / deployment secrets)
    database_url: str
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 1 day
    app_env: str = "development"  # development, staging, production

    # CORS origins as comma-separated values
    # Example: "https://jobs.example.com,https://admin.example.com"
    cors_allow_origins: str = "http://localhost:5173"

    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # CV uploads; files land in upload_dir and are served under /uploads/cvs
    upload_dir: str = "uploads/cvs"
    max_cv_upload_mb: int = 5
    cv_require_pdf_magic: bool = True

    # Public job listing pagination
    default_page_size: int = 10
    max_page_size: int = 100

    # Request guards
    rate_limit_auth_per_min: int = 20

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def is_production(self) -> bool:
        return (self.app_env or "development").lower() in {"production", "prod"}


settings = Settings()
