"""Exceptions raised while assembling RASM sources."""


class AssemblyError(Exception):
    """Raised when a source program cannot be assembled."""