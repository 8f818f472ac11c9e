"""Filter & aggregation package."""

from storeledger.queries.engine import compute_totals, display_order, filter_by_store

__all__ = ["compute_totals", "display_order", "filter_by_store"]
