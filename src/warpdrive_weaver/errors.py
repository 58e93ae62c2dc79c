from __future__ import annotations


class DraftError(ValueError):
    """Base class for failures raised by the draft core."""


class MalformedInputError(DraftError):
    """The parsed WIF payload does not have the structure ingestion requires."""


class OutOfRangeError(DraftError):
    """A thread, shaft, treadle, pick or cell size lies outside its allowed range."""

    def __init__(self, name: str, value: object, upper: int, *, lower: int = 1) -> None:
        super().__init__(f"{name} {value!r} is outside {lower}..{upper}")
        self.name = name
        self.value = value
        self.lower = lower
        self.upper = upper


class SerializationError(DraftError):
    """The draft holds data that cannot be written back out as JSON."""


class ReadOnlyGridError(DraftError):
    """An edit was addressed to a derived grid."""


__all__ = [
    "DraftError",
    "MalformedInputError",
    "OutOfRangeError",
    "SerializationError",
    "ReadOnlyGridError",
]
