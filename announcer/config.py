# announcer/config.py
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_env: Literal["dev", "staging", "prod"] = "dev"
    service_name: str = "NotificationService"
    log_level: str = "INFO"
    log_json: bool = False

    # Broadcast pipeline
    batch_size: int = Field(default=15, gt=0)  # Recipients per fan-out round
    progress_interval: int = Field(default=100, gt=0)  # Log progress when targets is a multiple of this
    max_recipients: int = Field(default=1000, gt=0)  # Soft ceiling, checked at batch boundaries
    max_targets_hard_cap: int = Field(default=1000, gt=0)  # Audience size above this is rejected outright
    dry_run_sample_size: int = Field(default=10, ge=0)
    # None = wait for each send indefinitely
    send_timeout_seconds: float | None = Field(default=None, gt=0)

    # Email provider (SendGrid)
    sendgrid_api_key: str | None = None
    email_subject: str = "Gym Announcement"

    # SMS provider (Twilio)
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_from_number: str | None = None

    # Member directory
    member_directory_url: str = "http://localhost:3001"

    @property
    def is_production(self) -> bool:
        return self.app_env == "prod"

    @property
    def sms_enabled(self) -> bool:
        """Check if Twilio credentials are configured"""
        return bool(self.twilio_account_sid and self.twilio_auth_token)

    def validate_required_for_production(self) -> list[str]:
        """Validate that required settings exist for production"""
        if not self.is_production:
            return []

        required_fields = [
            ("sendgrid_api_key", self.sendgrid_api_key),
            ("twilio_account_sid", self.twilio_account_sid),
            ("twilio_auth_token", self.twilio_auth_token),
            ("twilio_from_number", self.twilio_from_number),
        ]

        return [name for name, value in required_fields if not value]


def warn_on_risky_config(s: "Settings") -> list[str]:
    warnings: list[str] = []

    if not s.sendgrid_api_key:
        warnings.append("sendgrid_api_key is missing (emails will only be queued, not sent).")

    if not s.sms_enabled:
        warnings.append("twilio credentials are missing (SMS will only be queued, not sent).")

    if s.max_recipients > s.max_targets_hard_cap:
        warnings.append(
            f"max_recipients={s.max_recipients} exceeds max_targets_hard_cap={s.max_targets_hard_cap}: "
            "the soft ceiling can never be reached on a live broadcast."
        )

    if s.send_timeout_seconds is None:
        warnings.append("send_timeout_seconds is not set (a hung provider call stalls its whole batch).")

    return warnings


def validate_or_warn(s: "Settings") -> None:
    """
    In prod: enforce required settings (hard fail).
    In non-prod: warn only.
    """
    missing = s.validate_required_for_production()

    if missing:
        raise RuntimeError(f"Missing required settings for production: {', '.join(missing)}")

    for msg in warn_on_risky_config(s):
        print(f"[WARN][config] {msg}")

settings = Settings()
validate_or_warn(settings)
