"""Console logging for the mirror.

Every call takes ``source=`` (the component name, rendered as ``[Source]``)
and an optional ``payload=``. Event dataclasses render as
``Kind{field=value}``; pydantic rows and dicts render as compact JSON.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel

from distri_mirror.core.constants import LOG_DATE_FORMAT, LOGGER_NAME

LINE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def render_payload(payload: Any) -> str:
    if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
        fields = " ".join(f"{f.name}={getattr(payload, f.name)}" for f in dataclasses.fields(payload))
        return f"{type(payload).__name__}{{{fields}}}"
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    if isinstance(payload, (dict, list)):
        return json.dumps(payload, sort_keys=True, default=str)
    return str(payload)


class SimpleLogger:
    """Thin facade over the ``distri_mirror`` logger."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(LOGGER_NAME)
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LINE_FORMAT, datefmt=LOG_DATE_FORMAT))
            self._logger.addHandler(handler)
        self._timers: Dict[str, datetime] = {}
        self.configure()

    def configure(self, level: int = logging.INFO) -> None:
        self._logger.setLevel(level)

    def _emit(self, level: int, msg: str, source: str | None, payload: Any | None) -> None:
        if not self._logger.isEnabledFor(level):
            return
        line = f"[{source}] {msg}" if source else msg
        if payload is not None:
            line = f"{line} {render_payload(payload)}"
        self._logger.log(level, line)

    def debug(self, msg: str, source: str | None = None, payload: Any | None = None) -> None:
        self._emit(logging.DEBUG, msg, source, payload)

    def info(self, msg: str, source: str | None = None, payload: Any | None = None) -> None:
        self._emit(logging.INFO, msg, source, payload)

    def warning(self, msg: str, source: str | None = None, payload: Any | None = None) -> None:
        self._emit(logging.WARNING, msg, source, payload)

    def error(self, msg: str, source: str | None = None, payload: Any | None = None) -> None:
        self._emit(logging.ERROR, msg, source, payload)

    def success(self, msg: str, source: str | None = None, payload: Any | None = None) -> None:
        self._emit(logging.INFO, f"✅ {msg}", source, payload)

    def banner(self, msg: str, source: str | None = None) -> None:
        self._emit(logging.INFO, f"==== {msg} ====", source, None)

    # timers bracket the bootstrap scan
    def start_timer(self, name: str) -> None:
        self._timers[name] = datetime.now()

    def end_timer(self, name: str, source: str | None = None) -> None:
        start = self._timers.pop(name, None)
        if start is not None:
            elapsed = (datetime.now() - start).total_seconds()
            self._emit(logging.INFO, f"{name} completed in {elapsed:.2f}s", source, None)


log = SimpleLogger()


def configure_console_log(debug: bool = False) -> None:
    log.configure(logging.DEBUG if debug else logging.INFO)


__all__ = ["log", "configure_console_log", "render_payload", "SimpleLogger"]
