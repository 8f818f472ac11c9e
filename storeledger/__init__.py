"""
Store Ledger - Source Package

A personal multi-store bookkeeping client: record income and expense
entries tagged with a store, browse and aggregate them, manage stores,
and ask an AI service for a plain-language summary.

DESIGN PRINCIPLES:
1. The backend is the source of truth; the local cache is a read-through view
2. Every mutation ends with a resync, whether it succeeded or not
3. Local validation never reaches the backend
4. Errors become status messages at the coordinator boundary
5. Backend is swappable
"""

__version__ = "1.0.0"
__author__ = "Store Ledger Team"
