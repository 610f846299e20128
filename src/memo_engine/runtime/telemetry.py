"""Telemetry for the memo editor, built on telelog.

``configure`` picks the active telelog config, ``get_logger`` hands out cached
loggers, ``record_event`` writes one structured ``event::<name>`` line and
``span`` profiles a block under a named component.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, MutableMapping, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "MEMO_ENGINE_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "memo_engine")
PRESETS = ("development", "production", "performance")

_LOGGER_CACHE: MutableMapping[str, Any] = {}
_ACTIVE_CONFIG: Optional[Any] = None


def _env(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}")


def _env_on(name: str) -> bool:
    return (_env(name) or "").lower() in {"1", "true", "yes", "on"}


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def _preset_config(preset: str) -> Any:
    if preset not in PRESETS:
        raise ValueError(f"Unknown preset '{preset}'.")
    config = tl.Config()
    if preset == "development":
        config.with_min_level("DEBUG")
        config.with_console_output(True)
        config.with_colored_output(True)
        return config

    # production and performance both write buffered files
    config.with_console_output(False)
    config.with_buffering(True)
    if preset == "performance":
        config.with_min_level("DEBUG")
        config.with_json_format(True)
        config.with_file_output(_env("LOG_FILE") or "memo_engine-performance.log")
    else:
        config.with_min_level("INFO")
        config.with_file_output(_env("LOG_FILE") or "memo_engine.log")
    return config


def _env_config() -> Any:
    config = tl.Config()
    config.with_min_level((_env("LOG_LEVEL") or "INFO").upper())
    console = not _env_on("DISABLE_CONSOLE")
    config.with_console_output(console)
    if console:
        config.with_colored_output(not _env_on("NO_COLOR"))
    if _env_on("LOG_JSON"):
        config.with_json_format(True)
    if _env("LOG_FILE"):
        config.with_file_output(_env("LOG_FILE"))
    if _env_on("LOG_BUFFERED"):
        config.with_buffering(True)
        config.with_buffer_size(int(_env("LOG_BUFFER_SIZE") or "2048"))
    return config


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Replace the active telelog configuration.

    ``preset`` is one of :data:`PRESETS`; without either argument the
    ``MEMO_ENGINE_LOG_*`` environment variables decide.
    """

    global _ACTIVE_CONFIG
    if config is not None and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")
    if preset:
        config = _preset_config(preset)
    elif config is None:
        config = _env_config()

    # span() needs logger.profile
    config.with_profiling(True)
    _ACTIVE_CONFIG = config
    _LOGGER_CACHE.clear()


def get_logger(name: Optional[str] = None) -> Any:
    """Cached ``telelog.Logger`` bound to the active configuration."""

    if _ACTIVE_CONFIG is None:
        configure()
    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name not in _LOGGER_CACHE:
        _LOGGER_CACHE[logger_name] = tl.Logger.with_config(logger_name, _ACTIVE_CONFIG)
    return _LOGGER_CACHE[logger_name]


def _write(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    name = level.lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        structured(message, [(str(k), _text(v)) for k, v in payload.items()])
        return
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    _write(
        get_logger(logger_name),
        level,
        f"event::{name}",
        {"event": name, **(data or {})},
    )


@dataclass
class SpanHandle:
    """Yielded by :func:`span`; collects metadata reported on failure."""

    logger: Any
    span_name: str
    component: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        payload: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component:
            payload["component"] = self.component
        payload["reason"] = reason
        _write(self.logger, "error", "span::fail", payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a block, tracked as ``component`` when one is given.

    ``metadata`` is pushed as logger context for the duration of the block.
    An exception escaping the block is reported through :meth:`SpanHandle.fail`
    and re-raised.
    """

    log = get_logger(logger_name)
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    for key, value in context.items():
        log.add_context(key, value)
    handle = SpanHandle(
        logger=log, span_name=name, component=component, metadata=dict(context)
    )
    try:
        if component:
            with log.track_component(component), log.profile(name):
                yield handle
        else:
            with log.profile(name):
                yield handle
    except Exception as exc:
        handle.fail(str(exc))
        raise
    finally:
        for key in context:
            log.remove_context(key)


__all__ = [
    "PRESETS",
    "SpanHandle",
    "configure",
    "get_logger",
    "record_event",
    "span",
]
