"""Logging from config and env.

Levels (inclusive):
- ERROR: failed event handling
- WARNING: tolerated failures (malformed outputs, skipped payloads) and ERROR
- INFO: applied actions, ignored events, WARNING, and ERROR
- DEBUG: request-level detail, including urllib3 connection logs

Configure via config.yaml (logging.level, logging.format) or env (LOGGING_LEVEL, LOGGING_FORMAT).
"""

import logging

from stagebot.config import LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers, kept at WARNING unless running at DEBUG
NOISY_LOGGERS = ("urllib3",)


def _resolve_level(level: str) -> int:
    """Map level name to logging constant; unknown names give INFO."""
    return LEVELS.get(level.upper().strip(), logging.INFO)


class StagebotLogging:
    """Configures root logger from LoggingConfig (YAML + env LOGGING_*)."""

    def __init__(self, config: LoggingConfig) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT

    def setup(self) -> None:
        """Apply level and format to the root logger."""
        logging.basicConfig(
            level=self._level,
            format=self._format,
            force=True,
        )
        third_party_level = logging.DEBUG if self._level == logging.DEBUG else logging.WARNING
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(third_party_level)
