"""Mapping from label names to code addresses."""

from __future__ import annotations

from typing import Iterator

from rasm.errors import AssemblyError


class LabelMap:
    """Label table filled during address layout and read during encoding."""

    def __init__(self) -> None:
        self._entries: dict[str, int] = {}

    def add(self, label: str, address: int) -> None:
        """Record a label at a 16-bit address; a label may be defined only once."""
        if label in self._entries:
            raise AssemblyError(f"Label redefined: {label}")
        self._entries[label] = address & 0xFFFF

    def address_of(self, label: str) -> int:
        """Return the address of a defined label."""
        try:
            return self._entries[label]
        except KeyError:
            raise AssemblyError(f"Undefined label {label}") from None

    def __contains__(self, label: object) -> bool:
        return label in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)