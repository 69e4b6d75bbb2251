"""
Exceptions raised by the symtree engine.

All engine failures derive from SymtreeError and are raised synchronously;
the engine never returns a partial result.
"""


class SymtreeError(Exception):
    """Base class for every error raised by symtree."""


class ConversionError(SymtreeError, TypeError):
    """A value of an unsupported kind was given where a Node was expected."""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Cannot convert {value!r}, a '{type(value).__name__}', to a node"
        )


class PrecondError(SymtreeError, ValueError):
    """An internal operation was invoked in violation of its precondition."""
