"""Display formatting package."""

from storeledger.formatting.currency import (
    format_currency,
    format_timestamp,
    parse_currency,
)

__all__ = ["format_currency", "format_timestamp", "parse_currency"]
