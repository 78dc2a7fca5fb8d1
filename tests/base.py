import unittest
from pathlib import Path

from command_nexus import Command, CommandNexus

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class MockCommand(Command):
    name = "mock"

    message: str | None = None


class ChatCommand(Command):
    name = "chat"

    text: str = ""
    channel: int = 0
    tags: list[str] = []
    meta: dict = {}


class MockSender:

    def __init__(self, key: str = "sender"):
        self.key = key
        self.sent_messages: list[str] = []

    @property
    def last_sent_message(self) -> str | None:
        return self.sent_messages[-1] if self.sent_messages else None

    def send(self, message: str) -> None:
        self.sent_messages.append(message)

    def __repr__(self):
        return f"MockSender({self.key!r})"


class NexusTestCase(unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.sender = MockSender()
        self.targets: list[MockSender] = []
        self.nexus: CommandNexus[MockSender] = CommandNexus(
            MockSender.send,
            lambda: iter(self.targets),
        )

    def create_sender(self, key: str) -> MockSender:
        sender = MockSender(key)
        self.targets.append(sender)
        return sender

    def read_fixture(self, name: str) -> str:
        return (FIXTURES_DIR / name).read_text()
