"""
Pydantic base model for commands exchanged with clients.

A command is a named message with a payload. On the wire it is a flat JSON
object whose ``commandname`` field carries the name:

    {"commandname": "chat.say", "text": "hello"}

Concrete commands subclass ``Command``, set ``name`` and declare their payload
as ordinary model fields:

    class SayCommand(Command):
        name = "chat.say"
        text: str = ""
"""
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


DISCRIMINATOR = "commandname"


class Command(BaseModel):
    """Base class for all commands."""
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    # Wire name given to instances built in code
    name: ClassVar[str] = ""

    command_name: str = Field(default="", alias=DISCRIMINATOR, frozen=True)

    def model_post_init(self, __context: Any) -> None:
        """Stamp the class name on instances constructed without one."""
        if "command_name" not in self.model_fields_set:
            self.__dict__["command_name"] = type(self).name

    def to_message(self) -> dict:
        """Return the JSON-compatible wire representation of this command."""
        return self.model_dump(mode="json", by_alias=True)
