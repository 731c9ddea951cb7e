"""Errors raised while editing a node of the document."""

from __future__ import annotations


class EditError(Exception):
    """Base class for every recoverable edit failure.

    The message is what the node modal shows under the edit box.
    """

    default_message = "Edit failed"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class MalformedDocument(EditError):
    default_message = "Failed to parse current JSON document"

    @classmethod
    def from_exception(cls, exc: Exception) -> MalformedDocument:
        return cls(f"{cls.default_message}: {exc}")


class InvalidNumber(EditError):
    default_message = "Invalid number"


class InvalidBoolean(EditError):
    default_message = "Invalid boolean (must be true or false)"


class InvalidFragment(EditError):
    default_message = "Invalid JSON for object/array node"


class ApplyFailed(EditError):
    default_message = "Failed to apply changes"
