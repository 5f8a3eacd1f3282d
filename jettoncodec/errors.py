"""
jettoncodec error taxonomy

All codec failures are synchronous and surface immediately to the caller.
Nothing here is retried internally.
"""

from __future__ import annotations

from typing import Any


class JettonCodecError(Exception):
    """Base class for every error raised by jettoncodec."""


class CellOverflowError(JettonCodecError):
    """A builder was asked to hold more than 1023 bits or 4 references."""


class CellUnderflowError(JettonCodecError):
    """A slice was asked for more bits or references than it has left."""


class UnsupportedKeyError(JettonCodecError, KeyError):
    """A metadata key outside the recognized enumeration.

    Aborts the whole metadata build. No partial dictionary is returned.
    """

    def __init__(self, key: str):
        super().__init__(f"Unsupported onchain key: {key!r}")
        self.key = key

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the whole message
        return self.args[0]


class InvalidMessageError(JettonCodecError, TypeError):
    """Dispatch input matches none of the recognized message shapes."""

    def __init__(self, message: Any):
        super().__init__(f"Invalid message type: {type(message).__name__}")
        self.message = message
