"""Configuration package."""

from storeledger.config.settings import (
    ClientSettings,
    SummaryServiceSettings,
    SheetsLedgerSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "ClientSettings",
    "SummaryServiceSettings",
    "SheetsLedgerSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
