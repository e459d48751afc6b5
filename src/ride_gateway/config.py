"""Ride Gateway — configuration loaded from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── Database ──────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./ride_gateway.db"

    # ── OTP ───────────────────────────────────────────────
    otp_ttl_seconds: int = 600
    otp_rate_limit_max: int = 3
    otp_rate_limit_window_seconds: int = 3600
    otp_sweep_interval_seconds: float = 60.0
    otp_sweep_batch_size: int = 100
    notifier_timeout_seconds: float = 10.0

    # ── Email (SMTP) ──────────────────────────────────────
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    email_from: str = "no-reply@example.com"

    # ── Push (FCM HTTP v1) ────────────────────────────────
    fcm_project_id: str = ""
    fcm_access_token: str = ""
    push_timeout_seconds: float = 10.0

    # ── Auth ──────────────────────────────────────────────
    jwt_secret: str = "changeme"
    jwt_algorithm: str = "HS256"

    # ── App ───────────────────────────────────────────────
    app_name: str = "Ride Gateway"
    host: str = "0.0.0.0"
    port: int = 4200
    debug: bool = False
    cors_origins: list[str] = ["*"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()
