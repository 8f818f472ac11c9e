"""
Store Ledger configuration.

Every external dependency the client talks to has one settings section,
read from the environment with pydantic-settings. Sections are built on
access, so a client running on the in-memory backend never needs the
spreadsheet variables, and one that never asks the AI never needs a key.
"""

import warnings
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SheetsLedgerSettings(BaseSettings):
    """Where the ledger lives when the Google Sheets backend is used."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Service account JSON used to authorize gspread"
    )
    spreadsheet_id: str = Field(
        ...,
        description="Key of the spreadsheet holding the ledger"
    )
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Worksheet with one row per transaction"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Append-only worksheet for audit events"
    )

    @field_validator('credentials_path')
    @classmethod
    def check_credentials_file(cls, v: str) -> str:
        # The file may be mounted after the settings load
        if not Path(v).exists():
            warnings.warn(f"Service account file {v} does not exist yet.")
        return v


class SummaryServiceSettings(BaseSettings):
    """Gemini model used for AI questions and reports."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(..., description="Key passed to genai.configure")
    model_name: str = Field(default="gemini-1.5-flash-latest")
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="max_output_tokens of the generation config"
    )
    temperature: float = Field(default=0.4, ge=0.0, le=1.0)


class ClientSettings(BaseSettings):
    """
    Behaviour of the client itself.

    Read from unprefixed environment variables and the local .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(default="development")
    debug_mode: bool = Field(default=False)
    log_level: str = Field(
        default="INFO",
        description="stdlib level name for structured logs"
    )

    use_sheets_backend: bool = Field(
        default=True,
        description="False runs against the in-memory ledger"
    )

    transport_ready_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Startup fails if the backend-ready signal takes longer"
    )
    discard_stale_refreshes: bool = Field(
        default=False,
        description=(
            "Drop a refresh response when a newer one for the same data "
            "set was already applied"
        )
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper()


class Settings(BaseSettings):
    """All sections, each built when first read."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def sheets(self) -> SheetsLedgerSettings:
        return SheetsLedgerSettings()

    @property
    def ai(self) -> SummaryServiceSettings:
        return SummaryServiceSettings()

    @property
    def client(self) -> ClientSettings:
        return ClientSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Process-wide settings root.

    Tests that change the environment call get_settings.cache_clear().
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Try to load every section.

    Returns {section: loaded}; a failed section also gets a
    "<section>_error" entry with the validation message.
    """
    settings = get_settings()
    loaders = {
        "sheets": lambda: settings.sheets,
        "ai": lambda: settings.ai,
        "client": lambda: settings.client,
    }

    results = {}
    for name, load in loaders.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)
    return results
