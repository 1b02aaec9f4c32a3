import pytest

from rasm.heap import (
    ALIGNMENT,
    BLOCK_MAGIC,
    HEADER_SIZE,
    VM_MEMORY_CAPACITY,
    Heap,
    align,
)


def _accounted(heap):
    return sum(b.size for b in heap.blocks()) + HEADER_SIZE * len(heap.blocks())


@pytest.mark.parametrize("size", [0, 1, 15, 16, 17, 100, 1000])
def test_align_invariants(size):
    result = align(size)
    assert result % ALIGNMENT == 0
    assert size <= result < size + ALIGNMENT


def test_align_rejects_negative():
    with pytest.raises(ValueError):
        align(-1)


def test_fresh_heap_is_one_free_block():
    heap = Heap()
    blocks = heap.blocks()
    assert len(blocks) == 1
    assert blocks[0].free
    assert blocks[0].size == VM_MEMORY_CAPACITY - HEADER_SIZE
    assert blocks[0].magic == BLOCK_MAGIC


def test_tiny_capacity_rejected():
    with pytest.raises(ValueError):
        Heap(capacity=HEADER_SIZE)


def test_first_allocation_follows_header():
    heap = Heap()
    assert heap.malloc(10) == HEADER_SIZE


def test_consecutive_allocations_are_laid_out_in_order():
    heap = Heap()
    first = heap.malloc(20)
    second = heap.malloc(5)
    assert second == first + align(20) + HEADER_SIZE
    assert _accounted(heap) == VM_MEMORY_CAPACITY


def test_freed_block_is_reused():
    heap = Heap()
    first = heap.malloc(32)
    heap.malloc(32)
    heap.free(first)
    assert heap.malloc(32) == first


def test_freeing_everything_restores_single_block():
    heap = Heap()
    ptrs = [heap.malloc(n) for n in (8, 40, 100, 3)]
    for ptr in (ptrs[1], ptrs[3], ptrs[0], ptrs[2]):
        heap.free(ptr)
    blocks = heap.blocks()
    assert len(blocks) == 1
    assert blocks[0].free
    assert blocks[0].size == VM_MEMORY_CAPACITY - HEADER_SIZE


def test_free_merges_with_previous_neighbour():
    heap = Heap()
    a = heap.malloc(16)
    b = heap.malloc(16)
    heap.malloc(16)
    heap.free(a)
    heap.free(b)
    blocks = heap.blocks()
    assert blocks[0].free
    assert blocks[0].size == 16 + HEADER_SIZE + 16
    assert not blocks[1].free
    assert _accounted(heap) == VM_MEMORY_CAPACITY


def test_free_none_changes_nothing():
    heap = Heap()
    heap.malloc(10)
    before = heap.blocks()
    heap.free(None)
    assert heap.blocks() == before


def test_free_unknown_pointer_raises():
    heap = Heap()
    heap.malloc(10)
    with pytest.raises(ValueError):
        heap.free(HEADER_SIZE + 1)


def test_exhaustion_raises_memory_error():
    heap = Heap(capacity=256)
    with pytest.raises(MemoryError):
        heap.malloc(256)


def test_small_heap_fills_up():
    heap = Heap(capacity=256)
    heap.malloc(64)
    heap.malloc(64)
    with pytest.raises(MemoryError):
        heap.malloc(64)


def test_calloc_zeroes_memory():
    heap = Heap()
    ptr = heap.malloc(32)
    heap.memory[ptr : ptr + 32] = b"\xaa" * 32
    heap.free(ptr)
    zeroed = heap.calloc(4, 8)
    assert zeroed == ptr
    assert heap.memory[zeroed : zeroed + 32] == bytes(32)


def test_realloc_grow_preserves_contents():
    heap = Heap()
    ptr = heap.malloc(16)
    heap.memory[ptr : ptr + 16] = bytes(range(16))
    heap.malloc(16)  # block the in-place path
    grown = heap.realloc(ptr, 64)
    assert grown != ptr
    assert heap.memory[grown : grown + 16] == bytes(range(16))
    assert heap.blocks()[0].free
    assert _accounted(heap) == VM_MEMORY_CAPACITY


def test_realloc_shrink_keeps_pointer():
    heap = Heap()
    ptr = heap.malloc(200)
    assert heap.realloc(ptr, 10) == ptr
    blocks = heap.blocks()
    assert blocks[0].size == align(10)
    assert blocks[1].free


def test_realloc_none_allocates():
    heap = Heap()
    ptr = heap.realloc(None, 24)
    assert ptr == HEADER_SIZE
    assert not heap.blocks()[0].free


def test_realloc_zero_frees():
    heap = Heap()
    ptr = heap.malloc(24)
    assert heap.realloc(ptr, 0) is None
    assert len(heap.blocks()) == 1
    assert heap.blocks()[0].free


def test_leak_report_without_leaks():
    heap = Heap()
    ptr = heap.malloc(24)
    heap.free(ptr)
    assert heap.leak_report() == "[Leak Report]\n  No leaks detected.\n"


def test_leak_report_lists_used_blocks():
    heap = Heap()
    heap.malloc(20)
    report = heap.leak_report()
    lines = report.splitlines()
    assert lines[0] == "[Leak Report]"
    assert lines[1].endswith(f"| Size: {align(20)} bytes")
    assert lines[2] == f"  1 leaks found, total leaked: {align(20)} bytes"


def test_blocks_returns_snapshots():
    heap = Heap()
    snapshot = heap.blocks()
    snapshot[0].free = False
    snapshot[0].size = 1
    fresh = heap.blocks()
    assert fresh[0].free is True
    assert fresh[0].size == VM_MEMORY_CAPACITY - HEADER_SIZE
    assert heap.malloc(8) == HEADER_SIZE
    assert heap.leak_report().endswith(
        f"  1 leaks found, total leaked: {align(8)} bytes\n"
    )


def test_dump_describes_each_block():
    heap = Heap()
    heap.malloc(20)
    lines = heap.dump().splitlines()
    assert lines[0] == "[Memory Dump]"
    assert len(lines) == 1 + len(heap.blocks())
    assert lines[1].endswith("| Used")
    assert lines[2].endswith("| Free")