"""Two-pass RASM assembler, its instruction tables, and a block heap allocator."""

__version__ = "0.1.0"
__all__ = ["assembler", "errors", "heap", "labels", "opcodes", "parser", "tables"]