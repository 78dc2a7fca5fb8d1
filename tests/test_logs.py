import json
import logging
import re
import unittest

from command_nexus.logs import NexusJsonFormatter, configure_logging


class TestNexusJsonFormatter(unittest.TestCase):

    def make_record(self, message, *args):
        return logging.LogRecord(
            name="command_nexus",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg=message,
            args=args,
            exc_info=None,
        )

    def test_renamed_fields(self):
        output = NexusJsonFormatter().format(self.make_record("Unhandled command '%s'", "nope"))
        data = json.loads(output)

        self.assertEqual(data["level"], "WARNING")
        self.assertEqual(data["logger"], "command_nexus")
        self.assertEqual(data["message"], "Unhandled command 'nope'")
        self.assertNotIn("asctime", data)
        self.assertNotIn("levelname", data)

    def test_timestamp_has_milliseconds(self):
        data = json.loads(NexusJsonFormatter().format(self.make_record("hello")))

        self.assertRegex(data["ts"], re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}$"))


class TestConfigureLogging(unittest.TestCase):

    def tearDown(self):
        logger = logging.getLogger("command_nexus")
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True

    def test_json_console_handler(self):
        configure_logging("debug")

        logger = logging.getLogger("command_nexus")
        self.assertEqual(logger.level, logging.DEBUG)
        self.assertEqual(len(logger.handlers), 1)
        self.assertIsInstance(logger.handlers[0].formatter, NexusJsonFormatter)

    def test_plain_text_console_handler(self):
        configure_logging(json_format=False)

        logger = logging.getLogger("command_nexus")
        self.assertEqual(logger.level, logging.INFO)
        self.assertNotIsInstance(logger.handlers[0].formatter, NexusJsonFormatter)
