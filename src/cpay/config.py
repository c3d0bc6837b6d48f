"""Application configuration using pydantic settings with structured sections.

Values come from ``CPAY_*`` environment variables (nested sections use
``__``, e.g. ``CPAY_OTP__STEP_SECONDS=30``) or a ``.env`` file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OtpSettings(BaseModel):
    step_seconds: int = Field(default=60, gt=0)
    tolerance_steps: int = Field(default=1, ge=0)
    digits: int = Field(default=6, ge=6, le=8)


class TransferSettings(BaseModel):
    validity_seconds: int = Field(default=300, gt=0)
    default_currency: str = Field(default="PHP", pattern=r"^[A-Z]{3}$")


class DeliverySettings(BaseModel):
    backend: Literal["log", "http"] = "log"
    gateway_url: Optional[str] = None
    api_key: str = ""
    timeout_seconds: float = Field(default=10.0, gt=0)
    sender_name: str = "CPay"

    @model_validator(mode="after")
    def _require_gateway_url(self) -> "DeliverySettings":
        if self.backend == "http" and not self.gateway_url:
            raise ValueError("delivery.gateway_url is required for the http backend")
        return self


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="CPAY_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    db_path: Optional[Path] = None
    database_url: Optional[str] = None
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    otp: OtpSettings = OtpSettings()
    transfer: TransferSettings = TransferSettings()
    delivery: DeliverySettings = DeliverySettings()

    @property
    def validity_seconds(self) -> int:
        return self.transfer.validity_seconds

    @property
    def default_currency(self) -> str:
        return self.transfer.default_currency


@lru_cache()
def get_settings() -> Settings:
    return Settings()
