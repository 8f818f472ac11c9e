"""
Filter & Aggregation Engine

DESIGN DECISION: Everything here is a pure function of (transactions,
selection). Results are recomputed on demand and never cached, so a
mutation of the cache can never leave a stale total behind.
"""

from decimal import Decimal
from typing import Iterable

from storeledger.models.transaction import (
    ALL_STORES,
    Totals,
    Transaction,
    TransactionKind,
)


def filter_by_store(
    transactions: Iterable[Transaction],
    selection: str,
) -> list[Transaction]:
    """
    Transactions visible under the selected store.

    The sentinel selects everything; any other name is an exact,
    case-sensitive match on `store_name`.
    """
    if selection == ALL_STORES:
        return list(transactions)
    return [t for t in transactions if t.store_name == selection]


def compute_totals(transactions: Iterable[Transaction]) -> Totals:
    """Income, expense and balance (income - expense). Empty input gives zeros."""
    income = Decimal("0")
    expense = Decimal("0")
    for t in transactions:
        if t.kind == TransactionKind.INCOME:
            income += t.amount
        else:
            expense += t.amount
    return Totals(income=income, expense=expense, balance=income - expense)


def display_order(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Most recently added first (reverse of cache append order)."""
    return list(reversed(list(transactions)))
