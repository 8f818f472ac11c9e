"""
Store Directory

The ordered list of store names, sentinel first, plus the authoritative
count per store and the current selection.

DESIGN DECISION: The directory is reconciled from the backend, never
computed from the local cache. The cache may be a partial or stale view;
the backend's counts are not.

The selection is kept as an index into the directory. Whenever the names
change, a selection whose name is gone falls back to the sentinel.
"""

from typing import Iterable, Mapping

from storeledger.models.transaction import ALL_STORES, StoreEntry


class StoreDirectory:
    """Sentinel-first store list with selection."""

    def __init__(self):
        self._names: list[str] = [ALL_STORES]
        self._counts: dict[str, int] = {}
        self._selected_index = 0

    # -------------------------------------------------------------------------
    # Names & counts
    # -------------------------------------------------------------------------

    @property
    def names(self) -> list[str]:
        return list(self._names)

    @property
    def counts(self) -> dict[str, int]:
        return dict(self._counts)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def replace_names(self, store_names: Iterable[str]) -> None:
        """
        Rebuild the directory from the backend's unique store list.

        Any copy of the sentinel in the input is dropped; the rest is
        sorted lexicographically after the sentinel. Selection is
        revalidated every time.
        """
        previous = self.selected_name
        rest = sorted({name for name in store_names if name != ALL_STORES})
        self._names = [ALL_STORES, *rest]
        self._revalidate_selection(previous)

    def replace_counts(self, counts: Mapping[str, int]) -> None:
        """Store the backend's per-store transaction counts as-is."""
        self._counts = dict(counts)

    def existing_store_names(self) -> list[str]:
        """Directory names without the sentinel, for picking a store on input."""
        return self._names[1:]

    def entries(self) -> list[StoreEntry]:
        """
        Every store the backend reports a count for.

        Stores in the directory come first, in directory order; counted
        stores not yet in the directory follow, sorted.
        """
        ordered = [name for name in self._names if name in self._counts]
        ordered.extend(sorted(set(self._counts) - set(self._names)))
        return [
            StoreEntry(name=name, transaction_count=self._counts[name])
            for name in ordered
        ]

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    @property
    def selected_index(self) -> int:
        return self._selected_index

    @property
    def selected_name(self) -> str:
        return self._names[self._selected_index]

    @property
    def is_unfiltered(self) -> bool:
        return self.selected_name == ALL_STORES

    def select(self, name: str) -> None:
        """
        Select a store by name.

        Raises:
            KeyError: If the name is not in the directory
        """
        try:
            self._selected_index = self._names.index(name)
        except ValueError:
            raise KeyError(name)

    def select_index(self, index: int) -> None:
        """
        Select a store by directory position.

        Raises:
            IndexError: If the position is outside the directory
        """
        if not 0 <= index < len(self._names):
            raise IndexError(index)
        self._selected_index = index

    def _revalidate_selection(self, previous_name: str) -> None:
        # The index may point at a different name after a rebuild
        if previous_name in self._names:
            self._selected_index = self._names.index(previous_name)
        else:
            self._selected_index = self._names.index(ALL_STORES)
