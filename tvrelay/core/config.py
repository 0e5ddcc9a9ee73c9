# tvrelay/core/config.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger("tvrelay.config")

SENSITIVE_KEYS = {
    "MEXC_API_KEY",
    "MEXC_API_SECRET",
}

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Runtime configuration loaded from .env / environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # --- Exchange / API ---
    MEXC_API_KEY: str = ""
    MEXC_API_SECRET: str = ""
    ENABLE_RATE_LIMIT: bool = True

    # fetch_balance() params type; perpetuals live in the swap account
    BALANCE_ACCOUNT_TYPE: str = "swap"

    # --- Webhook server ---
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ALERT_PATH: str = "/tradingview/meanreversion"

    # --- Symbols ---
    # stripped from the tradable symbol to get the bare crypto name (BTCUSDT -> BTC)
    QUOTE_CURRENCY: str = "USDT"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    @field_validator("QUOTE_CURRENCY", mode="before")
    @classmethod
    def parse_quote_currency(cls, v: Any) -> str:
        return str(v or "").strip().upper()

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: Any) -> str:
        return str(v or "INFO").strip().upper()

    def model_post_init(self, __context: Any) -> None:
        self.MEXC_API_KEY = (self.MEXC_API_KEY or "").strip()
        self.MEXC_API_SECRET = (self.MEXC_API_SECRET or "").strip()
        self.BALANCE_ACCOUNT_TYPE = (self.BALANCE_ACCOUNT_TYPE or "swap").lower().strip()

        path = (self.ALERT_PATH or "").strip()
        if path and not path.startswith("/"):
            path = "/" + path
        self.ALERT_PATH = path

    def validate_runtime(self) -> List[str]:
        """
        Fail-fast validation. Returns warnings (non-fatal).
        Raises ValueError for fatal misconfiguration.
        """
        errors: List[str] = []
        warnings: List[str] = []

        if not self.MEXC_API_KEY:
            errors.append("MEXC_API_KEY is required.")
        if not self.MEXC_API_SECRET:
            errors.append("MEXC_API_SECRET is required.")

        if not (0 < self.PORT < 65536):
            errors.append("PORT must be between 1 and 65535.")

        if not self.ALERT_PATH or self.ALERT_PATH == "/":
            errors.append("ALERT_PATH must be a non-root path.")

        if not self.QUOTE_CURRENCY:
            errors.append("QUOTE_CURRENCY must not be empty.")

        if self.LOG_LEVEL not in VALID_LOG_LEVELS:
            warnings.append(f"LOG_LEVEL '{self.LOG_LEVEL}' is unknown; falling back to INFO.")

        if self.BALANCE_ACCOUNT_TYPE != "swap":
            warnings.append(
                f"BALANCE_ACCOUNT_TYPE={self.BALANCE_ACCOUNT_TYPE}: balance log will not "
                "reflect the futures account."
            )

        if not self.ENABLE_RATE_LIMIT:
            warnings.append("ENABLE_RATE_LIMIT is off; the exchange may throttle requests.")

        if errors:
            msg = "Config validation failed:\n" + "\n".join([f"- {e}" for e in errors])
            raise ValueError(msg)

        return warnings

    def public_dict(self) -> Dict[str, Any]:
        data = self.model_dump()
        # remove/mask secrets
        for k in list(data.keys()):
            if k in SENSITIVE_KEYS:
                data[k] = "***" if data[k] else ""
        return data


# Pydantic v2 + postponed annotations safety
Settings.model_rebuild()
settings = Settings()
