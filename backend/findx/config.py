from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/findx.db"
    log_level: str = "INFO"

    # Access tokens
    secret_key: str = "dev-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7

    # Comma-separated list of allowed origins
    cors_origins: str = "http://localhost:3000"

    # Cloudinary blob storage
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "findx/resumes"
    storage_timeout_seconds: float = 30.0

    # Resume limits
    max_resumes: int = 10
    max_resume_size_mb: int = 10

    # Password reset
    reset_code_ttl_minutes: int = 10

    # Outbound mail
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    mail_from: str = "FindX <no-reply@findx.app>"

    # Celery configuration
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/0"

    # Domain registry reconciliation
    registry_reconcile_interval_hours: int = 24

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
