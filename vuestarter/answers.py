"""Immutable answer store built up while walking the prompt schema."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any


class AnswerStore(Mapping[str, Any]):
    """Read-only mapping of prompt name to the resolved answer.

    Values are heterogeneous: strings for ``string`` prompts, booleans for
    ``confirm`` prompts and the selected choice value for ``list`` prompts.
    ``with_answer`` returns a new store, so a store handed to a predicate can
    never change underneath it.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"AnswerStore({self._data!r})"

    def with_answer(self, name: str, value: Any) -> AnswerStore:
        """Return a copy of the store with *name* set to *value*."""
        if name in self._data:
            raise KeyError(f"Answer '{name}' is already set")
        return AnswerStore({**self._data, name: value})

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)
