import logging.config
import time

from pythonjsonlogger import jsonlogger


class NexusJsonFormatter(jsonlogger.JsonFormatter):
    def __init__(self, *args, **kwargs):
        kwargs.setdefault("datefmt", "%Y-%m-%dT%H:%M:%S")
        kwargs.setdefault(
            "rename_fields",
            {
                "asctime": "ts",
                "levelname": "level",
                "name": "logger",
            },
        )
        super().__init__("%(asctime)s %(levelname)s %(name)s %(message)s", *args, **kwargs)

    def formatTime(self, record, datefmt=None):
        ct = self.converter(record.created)
        stamp = time.strftime(datefmt or self.datefmt, ct)
        return f"{stamp}.{int(record.msecs):03d}"


LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'nexus_json': {
            '()': 'command_nexus.logs.NexusJsonFormatter',
        },
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
            'datefmt': '%Y-%m-%dT%H:%M:%S',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'nexus_json',
        },
    },
    'loggers': {
        'command_nexus': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}


def configure_logging(level: str = "INFO", json_format: bool = True) -> None:
    """Apply LOGGING, optionally overriding the level and using plain text output."""
    config = {
        **LOGGING,
        'handlers': {
            'console': {
                **LOGGING['handlers']['console'],
                'formatter': 'nexus_json' if json_format else 'simple',
            },
        },
        'loggers': {
            'command_nexus': {
                **LOGGING['loggers']['command_nexus'],
                'level': level.upper(),
            },
        },
    }
    logging.config.dictConfig(config)
