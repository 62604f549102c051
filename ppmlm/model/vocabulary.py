"""Bidirectional symbol <-> dense integer ID mapping.

Two IDs are reserved before any user symbol is registered:
- `OOV_ID` (0): stands in for every symbol a closed vocabulary does not know.
- `ROOT_ID` (1): labels the root (empty) context of the trie. It is never
  observed and never predicted.

User symbols are numbered from 2 upward in first-seen order. IDs are never
reused or reassigned.
"""

from __future__ import annotations

from typing import Hashable, Iterable, Iterator


class _ReservedSymbol:
    """Sentinel symbol that cannot collide with any caller-supplied symbol."""

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return f"<{self._name}>"


OOV = _ReservedSymbol("OOV")
ROOT = _ReservedSymbol("ROOT")

OOV_ID = 0
ROOT_ID = 1
NUM_RESERVED_IDS = 2


class UnknownIdError(LookupError):
    """Raised when asking for the symbol of an ID that was never allocated."""


class Vocabulary:
    """Dense symbol ID allocator.

    An open vocabulary grows on demand: `id_of` assigns the next unused ID to a
    novel symbol. A closed vocabulary maps novel symbols to `OOV_ID` instead.
    Mutation is not synchronized; share an instance across threads only under
    an external one-writer discipline.
    """

    def __init__(self, symbols: Iterable[Hashable] = (), *, closed: bool = False) -> None:
        self._id_by_symbol: dict[Hashable, int] = {OOV: OOV_ID, ROOT: ROOT_ID}
        self._symbol_by_id: list[Hashable] = [OOV, ROOT]
        for symbol in symbols:
            self._allocate(symbol)
        self._closed = bool(closed)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop allocating IDs; unseen symbols map to OOV from now on."""

        self._closed = True

    def id_of(self, symbol: Hashable) -> int:
        """Return the ID of `symbol`, allocating one if the vocabulary is open."""

        existing = self._id_by_symbol.get(symbol)
        if existing is not None:
            return existing
        if self._closed:
            return OOV_ID
        return self._allocate(symbol)

    def lookup(self, symbol: Hashable) -> int:
        """Like `id_of` but never allocates."""

        return self._id_by_symbol.get(symbol, OOV_ID)

    def symbol_of(self, symbol_id: int) -> Hashable:
        idx = int(symbol_id)
        if idx < 0 or idx >= len(self._symbol_by_id):
            raise UnknownIdError(f"Symbol ID {symbol_id} was never allocated.")
        return self._symbol_by_id[idx]

    def size(self) -> int:
        """Number of allocated IDs, reserved ones included."""

        return len(self._symbol_by_id)

    def symbols(self) -> Iterator[Hashable]:
        """Iterate user symbols (reserved sentinels excluded) in ID order."""

        return iter(self._symbol_by_id[NUM_RESERVED_IDS:])

    def _allocate(self, symbol: Hashable) -> int:
        existing = self._id_by_symbol.get(symbol)
        if existing is not None:
            return existing
        new_id = len(self._symbol_by_id)
        self._id_by_symbol[symbol] = new_id
        self._symbol_by_id.append(symbol)
        return new_id

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._id_by_symbol

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"Vocabulary(size={self.size()}, {state})"
