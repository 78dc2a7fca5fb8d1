"""
Command registry and dispatch.

The nexus owns two mappings: command name -> command type, and command type ->
handler. Incoming JSON messages are resolved by their ``commandname`` field,
validated into the registered command type and handed to its handler together
with the sender. Outgoing commands are serialized and passed to the injected
send function, either for one recipient or for every broadcast target that
matches a predicate.

Transports call ``dispatch`` once per complete message they receive.
"""
import inspect
import json
import logging
from typing import Any, Callable, Generic, Iterable, Protocol, Type, TypeVar, get_type_hints

from pydantic import ValidationError

from command_nexus.commands import DISCRIMINATOR, Command
from command_nexus.errors import (
    CommandNexusError,
    DeserializationError,
    MalformedInputError,
    MissingDiscriminatorError,
    TransportError,
    UnhandledCommandTypeError,
)

logger = logging.getLogger("command_nexus")

S = TypeVar("S")
T = TypeVar("T", bound=Command)


class JsonCodec(Protocol):
    """Anything shaped like the ``json`` module."""

    def loads(self, s: str) -> Any:
        ...

    def dumps(self, obj: Any) -> str:
        ...


class CommandNexus(Generic[S]):
    """
    Routes JSON commands from senders to handlers, and commands to recipients.

    ``S`` is the sender/recipient type, opaque to the nexus.

    The registry is not synchronized. Register handlers at startup, or guard
    registration and dispatch with your own lock if both can run concurrently.

    Example:
        nexus = CommandNexus(send_message=send_text, get_broadcast_targets=connected_clients)

        @nexus.handler("chat.say")
        def on_say(client: Client, command: SayCommand) -> None:
            nexus.broadcast(command, lambda other: other.room == client.room)

        nexus.dispatch(client, '{"commandname": "chat.say", "text": "hello"}')
    """

    def __init__(
        self,
        send_message: Callable[[S, str], None],
        get_broadcast_targets: Callable[[], Iterable[S]],
        codec: JsonCodec = json,
    ):
        self._send_message = send_message
        self._get_broadcast_targets = get_broadcast_targets
        self._codec = codec
        self._name_to_type: dict[str, Type[Command]] = {}
        self._type_to_handler: dict[Type[Command], Callable[[S, Any], None]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        command_name: str,
        command_type: Type[T],
        handler: Callable[[S, T], None],
    ) -> None:
        """
        Register a handler for commands named ``command_name``.

        A later registration for the same name or type replaces the earlier one.

        Raises:
            ValueError: If command_name is empty
            TypeError: If command_type is not a Command subclass or handler is not callable
        """
        if not isinstance(command_name, str) or not command_name:
            raise ValueError("command_name must be a non-empty string")
        if not isinstance(command_type, type) or not issubclass(command_type, Command):
            raise TypeError(f"{command_type!r} must be a subclass of Command")
        if not callable(handler):
            raise TypeError(f"Handler for '{command_name}' must be callable, got {handler!r}")

        previous_type = self._name_to_type.get(command_name)
        if previous_type is not None or command_type in self._type_to_handler:
            logger.warning(
                "Replacing registration for '%s': %s -> %s",
                command_name,
                getattr(previous_type, "__name__", None),
                command_type.__name__,
            )

        self._name_to_type[command_name] = command_type
        self._type_to_handler[command_type] = handler
        logger.debug("Registered '%s' -> %s", command_name, command_type.__name__)

    def handler(
        self,
        command_name: str,
        command_type: Type[Command] | None = None,
    ) -> Callable[[Callable], Callable]:
        """
        Decorator form of ``register``.

        When command_type is omitted it is taken from the annotation of the
        handler's second parameter:

            @nexus.handler("mock")
            def on_mock(sender, command: MockCommand) -> None:
                ...
        """
        def decorator(func: Callable) -> Callable:
            resolved_type = command_type or _annotated_command_type(func)
            self.register(command_name, resolved_type, func)
            return func

        return decorator

    def registered_commands(self) -> list[str]:
        """Return a sorted list of registered command names."""
        return sorted(self._name_to_type)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_command_type(self, command_name: str) -> Type[Command]:
        """Resolve a command name, falling back to the base Command type."""
        return self._name_to_type.get(command_name, Command)

    def get_command_handler(self, command: str | Type[T]) -> Callable[[S, T], None]:
        """
        Get the handler for a command type, or for the type a name resolves to.

        Raises:
            UnhandledCommandTypeError: If the type has no registered handler
        """
        command_type = self.get_command_type(command) if isinstance(command, str) else command
        handler = self._type_to_handler.get(command_type)
        if handler is None:
            raise UnhandledCommandTypeError(command_type)
        return handler

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def parse_command(self, json_text: str) -> Command:
        """
        Parse a JSON message into an instance of its registered command type.

        Names with no registration resolve to the base Command type, which
        carries only the command name.

        Raises:
            MalformedInputError: If json_text is not valid JSON
            MissingDiscriminatorError: If there is no string 'commandname' field
            DeserializationError: If the payload does not fit the command type
        """
        try:
            document = self._codec.loads(json_text)
        except (TypeError, ValueError, RecursionError) as e:
            raise MalformedInputError(json_text) from e

        command_name = document.get(DISCRIMINATOR) if isinstance(document, dict) else None
        if not isinstance(command_name, str):
            raise MissingDiscriminatorError(document)

        command_type = self.get_command_type(command_name)
        try:
            return command_type.model_validate(document)
        except ValidationError as e:
            raise DeserializationError(command_name, command_type, document) from e

    def dispatch(self, sender: S, json_text: str) -> None:
        """
        Dispatch a JSON message from a sender to its registered handler.

        This is the entry point for transports. It:
        1. Parses the message and reads its 'commandname'
        2. Resolves and validates the command type (base Command if unknown)
        3. Looks up the handler for that type
        4. Invokes the handler with (sender, command)

        Exceptions raised by the handler propagate unchanged.

        Raises:
            MalformedInputError: If json_text is not valid JSON
            MissingDiscriminatorError: If there is no string 'commandname' field
            DeserializationError: If the payload does not fit the command type
            UnhandledCommandTypeError: If no handler is registered for the type
        """
        command = self.parse_command(json_text)
        try:
            handler = self.get_command_handler(type(command))
        except UnhandledCommandTypeError:
            logger.warning("Unhandled command '%s' from %r", command.command_name, sender)
            raise

        logger.debug("Dispatching '%s' from %r", command.command_name, sender)
        handler(sender, command)

    on_command = dispatch

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def serialize(self, command: Command) -> str:
        """Convert a command into a JSON string."""
        return self._codec.dumps(command.to_message())

    def send(self, command: Command, recipient: S) -> None:
        """
        Send a command to a single recipient.

        Raises:
            TransportError: If the send function fails
        """
        self._deliver(recipient, command.command_name, self.serialize(command))

    def broadcast(
        self,
        command: Command,
        predicate: Callable[[S], bool] | None = None,
    ) -> None:
        """
        Send a command to every broadcast target matching predicate.

        Targets are enumerated afresh on every call and sent to in order. The
        first failed send aborts the broadcast; later targets are not sent to.

        Raises:
            TransportError: If the send function fails for any recipient
        """
        message = self.serialize(command)
        sent = 0
        for recipient in self._get_broadcast_targets():
            if predicate is not None and not predicate(recipient):
                continue
            self._deliver(recipient, command.command_name, message)
            sent += 1
        logger.debug("Broadcast '%s' to %d recipients", command.command_name, sent)

    def _deliver(self, recipient: S, command_name: str, message: str) -> None:
        logger.debug("Sending '%s' to %r", command_name, recipient)
        try:
            self._send_message(recipient, message)
        except CommandNexusError:
            raise
        except Exception as e:
            raise TransportError(recipient, e) from e


def _annotated_command_type(func: Callable) -> Type[Command]:
    """Read the command type from the annotation of a handler's second parameter."""
    params = list(inspect.signature(func).parameters.values())
    if len(params) < 2:
        raise TypeError(f"{func.__name__} must accept (sender, command)")

    annotation = get_type_hints(func).get(params[1].name)
    if not isinstance(annotation, type) or not issubclass(annotation, Command):
        raise TypeError(
            f"Cannot infer command type for {func.__name__}: "
            f"annotate '{params[1].name}' with a Command subclass or pass command_type"
        )
    return annotation
