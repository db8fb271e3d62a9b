"""Choosing the renderers and preprocessors a book is built with, and their order."""

from __future__ import annotations

import graphlib
import logging
from collections.abc import Iterator, Mapping
from typing import Any

log = logging.getLogger(__name__)

COMMAND_PREFIX = "mdbinder-"
DEFAULT_PREPROCESSORS = ("links", "index")
BUILTIN_RENDERERS = ("html", "markdown")


class PipelineConfigError(ValueError):
    """Raised when the renderer or preprocessor configuration is invalid."""


def _table(config: Mapping[str, Any], key: str) -> Mapping[str, Any] | None:
    value = config.get(key)
    return value if isinstance(value, Mapping) else None


def _use_default_preprocessors(config: Mapping[str, Any]) -> bool:
    build = _table(config, "build") or {}
    return bool(build.get("use-default-preprocessors", True))


def _custom_command(key: str, table: Any) -> str:
    command = table.get("command") if isinstance(table, Mapping) else None
    return command if isinstance(command, str) else f"{COMMAND_PREFIX}{key}"


def get_custom_preprocessor_cmd(key: str, table: Any) -> str:
    """The command of a custom preprocessor: its ``command`` or a name derived from ``key``."""
    return _custom_command(key, table)


def determine_renderers(config: Mapping[str, Any]) -> list[tuple[str, str | None]]:
    """The renderers named in the ``output`` table, as ``(name, command)`` pairs.

    Built-in renderers have no command. With nothing configured, the HTML
    renderer is used.
    """
    output = _table(config, "output") or {}
    renderers: list[tuple[str, str | None]] = [
        (key, None) if key in BUILTIN_RENDERERS else (key, _custom_command(key, table))
        for key, table in sorted(output.items())
    ]
    return renderers or [("html", None)]


def _names(value: Any, name: str, field: str) -> Iterator[str]:
    if not isinstance(value, list):
        raise PipelineConfigError(f"Expected preprocessor.{name}.{field} to be an array")
    for entry in value:
        if not isinstance(entry, str):
            raise PipelineConfigError(
                f"Expected preprocessor.{name}.{field} to contain strings"
            )
        yield entry


def determine_preprocessors(config: Mapping[str, Any]) -> list[tuple[str, str | None]]:
    """The preprocessors to run, in order, as ``(name, command)`` pairs.

    Built-in preprocessors have no command. Ties in the ordering are broken
    by code-point order of the names.
    """
    use_defaults = _use_default_preprocessors(config)
    table = _table(config, "preprocessor") or {}
    sorter: graphlib.TopologicalSorter[str] = graphlib.TopologicalSorter()

    if use_defaults:
        for name in DEFAULT_PREPROCESSORS:
            sorter.add(name)

    def exists(name: str) -> bool:
        return (use_defaults and name in DEFAULT_PREPROCESSORS) or name in table

    for name, entry in sorted(table.items()):
        sorter.add(name)
        options = entry if isinstance(entry, Mapping) else {}

        if "before" in options:
            for later in _names(options["before"], name, "before"):
                if exists(later):
                    sorter.add(later, name)
                else:
                    log.warning(
                        'preprocessor.%s.after contains "%s", which was not found', name, later
                    )

        if "after" in options:
            for earlier in _names(options["after"], name, "after"):
                if exists(earlier):
                    sorter.add(name, earlier)
                else:
                    log.warning(
                        'preprocessor.%s.before contains "%s", which was not found',
                        name,
                        earlier,
                    )

    try:
        sorter.prepare()
    except graphlib.CycleError as exc:
        raise PipelineConfigError("Cyclic dependency detected in preprocessors") from exc

    ordered: list[tuple[str, str | None]] = []
    while sorter.is_active():
        ready = sorted(sorter.get_ready())
        for name in ready:
            if name in DEFAULT_PREPROCESSORS:
                ordered.append((name, None))
            else:
                ordered.append((name, get_custom_preprocessor_cmd(name, table[name])))
        sorter.done(*ready)
    return ordered