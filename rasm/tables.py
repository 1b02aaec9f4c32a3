"""Static string and sprite tables emitted after the code section."""

from __future__ import annotations

from typing import Iterator

SPRITE_SIZE = 8
_TEXT_ENCODING = "latin-1"


class StringTable:
    """Deduplicated table of NUL-terminated strings."""

    def __init__(self) -> None:
        self._strings: list[str] = []

    def add(self, text: str) -> int:
        """Add a string if it is new and return its index in the table."""
        try:
            return self._strings.index(text)
        except ValueError:
            self._strings.append(text)
            return len(self._strings) - 1

    def to_bytes(self) -> bytes:
        """Encode every string NUL-terminated, padded to an even length."""
        data = b"".join(s.encode(_TEXT_ENCODING) + b"\x00" for s in self._strings)
        if len(data) % 2:
            data += b"\x00"
        return data

    def __len__(self) -> int:
        return len(self._strings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._strings)

    def __getitem__(self, index: int) -> str:
        return self._strings[index]


class SpriteTable:
    """Table of 8-byte monochrome sprites, in the order they were added."""

    def __init__(self) -> None:
        self._sprites: list[bytes] = []

    def add(self, sprite: bytes) -> int:
        """Append an 8-byte sprite and return its index."""
        data = bytes(sprite)
        if len(data) != SPRITE_SIZE:
            raise ValueError(f"a sprite must be exactly {SPRITE_SIZE} bytes, got {len(data)}")
        self._sprites.append(data)
        return len(self._sprites) - 1

    def to_bytes(self) -> bytes:
        """Concatenate all sprites."""
        return b"".join(self._sprites)

    def __len__(self) -> int:
        return len(self._sprites)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._sprites)

    def __getitem__(self, index: int) -> bytes:
        return self._sprites[index]