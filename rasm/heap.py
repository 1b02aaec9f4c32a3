"""First-fit heap allocator over a fixed block of VM memory."""

from __future__ import annotations

from dataclasses import dataclass, replace

VM_MEMORY_CAPACITY = 0xFFFF
ALIGNMENT = 16
HEADER_SIZE = 40
MIN_BLOCK_SIZE = 16
BLOCK_MAGIC = 0xDEADBEEF


def align(size: int) -> int:
    """Round size up to the allocator's alignment."""
    if size < 0:
        raise ValueError("size must not be negative")
    return (size + ALIGNMENT - 1) & ~(ALIGNMENT - 1)


@dataclass
class Block:
    """A block header: where it sits in memory, its payload size and state."""

    offset: int
    size: int
    free: bool = True
    magic: int = BLOCK_MAGIC

    @property
    def address(self) -> int:
        """Address of the block's payload, as handed out by the allocator."""
        return self.offset + HEADER_SIZE


class Heap:
    """Sub-allocator that hands out payload addresses within ``memory``.

    Blocks are kept in address order; adjacent free blocks are merged on
    free and before each allocation.
    """

    def __init__(self, capacity: int = VM_MEMORY_CAPACITY) -> None:
        if capacity <= HEADER_SIZE:
            raise ValueError(f"capacity must exceed the block header size ({HEADER_SIZE})")
        self.capacity = capacity
        self.memory = bytearray(capacity)
        self._blocks: list[Block] = [Block(offset=0, size=capacity - HEADER_SIZE)]

    def _index_of(self, ptr: int) -> int:
        for index, block in enumerate(self._blocks):
            if block.address == ptr:
                return index
        raise ValueError(f"pointer {ptr:#x} was not returned by this heap")

    def _merge_with_next(self, index: int) -> None:
        block = self._blocks[index]
        following = self._blocks.pop(index + 1)
        block.size += HEADER_SIZE + following.size

    def _coalesce(self) -> None:
        index = 0
        while index + 1 < len(self._blocks):
            if self._blocks[index].free and self._blocks[index + 1].free:
                self._merge_with_next(index)
            else:
                index += 1

    def _split(self, index: int, size: int) -> None:
        block = self._blocks[index]
        if block.size >= size + HEADER_SIZE + MIN_BLOCK_SIZE:
            remainder = Block(
                offset=block.offset + HEADER_SIZE + size,
                size=block.size - size - HEADER_SIZE,
            )
            block.size = size
            self._blocks.insert(index + 1, remainder)

    def malloc(self, size: int) -> int:
        """Allocate size bytes and return the payload address.

        Raises MemoryError when no free block is large enough.
        """
        size = align(size)
        self._coalesce()
        for index, block in enumerate(self._blocks):
            if block.free and block.size >= size:
                self._split(index, size)
                block.free = False
                return block.address
        raise MemoryError(f"heap exhausted: cannot allocate {size} bytes")

    def free(self, ptr: int | None) -> None:
        """Release a block; freeing None does nothing."""
        if ptr is None:
            return
        index = self._index_of(ptr)
        self._blocks[index].free = True
        while index + 1 < len(self._blocks) and self._blocks[index + 1].free:
            self._merge_with_next(index)
        if index > 0 and self._blocks[index - 1].free:
            self._merge_with_next(index - 1)

    def calloc(self, nmemb: int, size: int) -> int:
        """Allocate nmemb * size bytes filled with zeros."""
        total = nmemb * size
        ptr = self.malloc(total)
        self.memory[ptr : ptr + total] = bytes(total)
        return ptr

    def realloc(self, ptr: int | None, size: int) -> int | None:
        """Resize a block, moving its contents if it has to grow.

        A None pointer allocates; a size of zero frees and returns None.
        """
        if ptr is None:
            return self.malloc(size)
        if size == 0:
            self.free(ptr)
            return None
        index = self._index_of(ptr)
        block = self._blocks[index]
        size = align(size)
        if block.size >= size:
            self._split(index, size)
            return ptr
        new_ptr = self.malloc(size)
        count = min(block.size, size)
        self.memory[new_ptr : new_ptr + count] = self.memory[ptr : ptr + count]
        self.free(ptr)
        return new_ptr

    def blocks(self) -> list[Block]:
        """Snapshot of every block in address order."""
        return [replace(block) for block in self._blocks]

    def leak_report(self) -> str:
        """Describe every block still in use."""
        used = [block for block in self._blocks if not block.free]
        lines = ["[Leak Report]"]
        lines += [f"  Leak at {b.address:#06x} | Size: {b.size} bytes" for b in used]
        if used:
            total = sum(block.size for block in used)
            lines.append(f"  {len(used)} leaks found, total leaked: {total} bytes")
        else:
            lines.append("  No leaks detected.")
        return "\n".join(lines) + "\n"

    def dump(self) -> str:
        """Describe every block, free or used, in address order."""
        lines = ["[Memory Dump]"]
        lines += [
            f"  Block {number}: {b.address:#06x} | Size: {b.size} | {'Free' if b.free else 'Used'}"
            for number, b in enumerate(self._blocks)
        ]
        return "\n".join(lines) + "\n"