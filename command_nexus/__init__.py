"""
Command dispatch and serialization over JSON.

Maps named JSON messages to typed commands, routes them to registered
handlers, and serializes commands back to JSON for one recipient or a
filtered broadcast.
"""
from command_nexus.commands import DISCRIMINATOR, Command
from command_nexus.errors import (
    CommandNexusError,
    DeserializationError,
    MalformedInputError,
    MissingDiscriminatorError,
    TransportError,
    UnhandledCommandTypeError,
)
from command_nexus.nexus import CommandNexus, JsonCodec

__all__ = [
    'DISCRIMINATOR',
    'Command',
    'CommandNexus',
    'CommandNexusError',
    'DeserializationError',
    'JsonCodec',
    'MalformedInputError',
    'MissingDiscriminatorError',
    'TransportError',
    'UnhandledCommandTypeError',
]
