"""
Errors raised by the command nexus.

Every failure surfaces synchronously to the caller of the operation that
triggered it. The underlying exception, where there is one, is chained with
``raise ... from``.
"""
from typing import Any


class CommandNexusError(Exception):
    """Base class for all command nexus errors."""


class MalformedInputError(CommandNexusError):
    """Raised when an incoming message is not parseable JSON."""
    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Malformed command message: {_preview(raw)}")


class MissingDiscriminatorError(CommandNexusError):
    """Raised when a parsed message has no string 'commandname' field."""
    def __init__(self, document: Any):
        self.document = document
        super().__init__(f"Command message has no string 'commandname': {_preview(document)}")


class DeserializationError(CommandNexusError):
    """Raised when a message does not fit the shape of its command type."""
    def __init__(self, command_name: str, command_type: type, document: Any):
        self.command_name = command_name
        self.command_type = command_type
        self.document = document
        super().__init__(
            f"Cannot deserialize command '{command_name}' into {command_type.__name__}"
        )


class UnhandledCommandTypeError(CommandNexusError):
    """Raised when no handler is registered for a command type."""
    def __init__(self, command_type: type):
        self.command_type = command_type
        super().__init__(f"No handler registered for command type: {command_type.__name__}")


class TransportError(CommandNexusError):
    """Raised when the injected send function fails for a recipient."""
    def __init__(self, recipient: Any, error: Exception):
        self.recipient = recipient
        self.error = error
        super().__init__(f"Failed to send command to {recipient!r}: {error}")


def _preview(value: Any, limit: int = 100) -> str:
    text = value if isinstance(value, str) else repr(value)
    if len(text) > limit:
        return text[:limit] + "..."
    return text
