# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""StructlogAdapter — LoggingPort backed by structlog."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from headerguard.core.config import Config
from headerguard.kernel.exceptions import ConfigurationException

_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_RENDERERS = ("console", "json")


def _level_number(name: str, level: Any) -> int:
    level_name = str(level).upper()
    if level_name not in _LEVELS:
        raise ConfigurationException(
            f"Unknown log level {level!r} for '{name}'; expected one of {', '.join(_LEVELS)}",
            code="CONFIG_INVALID_LOG_LEVEL",
            context={"logger": name, "level": level},
        )
    return getattr(logging, level_name)


class StructlogAdapter:
    """Configures structlog from ``headerguard.logging.*``.

    ``format`` selects the ``console`` or ``json`` renderer; under ``level``,
    ``root`` sets the root logger and every other key names a logger.
    Unknown formats or levels raise ``ConfigurationException``.
    """

    def __init__(self) -> None:
        self.root_level = "INFO"
        self.renderer = "console"
        self.logger_levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        levels = dict(config.get_section("headerguard.logging.level"))
        renderer = str(config.get("headerguard.logging.format", "console")).lower()
        if renderer not in _RENDERERS:
            raise ConfigurationException(
                f"Unknown log format {renderer!r}; expected one of {', '.join(_RENDERERS)}",
                code="CONFIG_INVALID_LOG_FORMAT",
                context={"format": renderer},
            )

        root = levels.pop("root", "INFO")
        root_number = _level_number("root", root)
        named = {name: _level_number(name, level) for name, level in levels.items()}

        self.renderer = renderer
        self.root_level = logging.getLevelName(root_number)
        self.logger_levels = {name: logging.getLevelName(number) for name, number in named.items()}

        structlog.configure(
            processors=[*self._shared_processors(), self._renderer()],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(format="%(message)s", stream=sys.stdout, level=root_number, force=True)
        for name, number in named.items():
            logging.getLogger(name).setLevel(number)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(_level_number(name, level))

    @staticmethod
    def _shared_processors() -> list[structlog.types.Processor]:
        return [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
        ]

    def _renderer(self) -> structlog.types.Processor:
        if self.renderer == "json":
            return structlog.processors.JSONRenderer()
        return structlog.dev.ConsoleRenderer()
