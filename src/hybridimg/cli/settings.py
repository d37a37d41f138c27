"""
Option defaults stored per subcommand in json or csv files.

json: ``{"default": {...}, "lowpass": {"sigma": 3.0}, ...}``; a flat object
is treated as the ``default`` section.

csv: three columns ``command,key,value`` with json-encoded values. An empty
command means ``default``. Two-column ``key,value`` rows also go to
``default``.
"""
from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

__all__ = [
    "SettingsError",
    "DEFAULT_SECTION",
    "load_settings",
    "save_settings",
    "select_settings",
    "build_default_map",
]

DEFAULT_SECTION = "default"

Sections = dict[str, dict[str, Any]]


class SettingsError(Exception):
    """Unreadable or malformed settings file."""


def _decode_cell(raw: str) -> Any:
    text = raw.strip()
    if not text:
        return ""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _is_header(row: list[str]) -> bool:
    names = [cell.strip().lower() for cell in row]
    return names in (["command", "key", "value"], ["key", "value"])


def _read_csv(path: Path) -> Sections:
    sections: Sections = {}
    with path.open("r", newline="", encoding="utf-8") as handle:
        for lineno, row in enumerate(csv.reader(handle), start=1):
            if not row or not any(cell.strip() for cell in row):
                continue
            if _is_header(row):
                continue
            if len(row) == 2:
                command, key, value = DEFAULT_SECTION, row[0], row[1]
            elif len(row) == 3:
                command, key, value = row
            else:
                raise SettingsError(
                    f"{path}:{lineno}: expected 'command,key,value', got {len(row)} columns"
                )
            key = key.strip()
            if not key:
                raise SettingsError(f"{path}:{lineno}: empty key")
            section = command.strip() or DEFAULT_SECTION
            sections.setdefault(section, {})[key] = _decode_cell(value)
    return sections


def _write_csv(path: Path, sections: Sections) -> None:
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(["command", "key", "value"])
        for command in sorted(sections):
            for key in sorted(sections[command]):
                writer.writerow([command, key, json.dumps(sections[command][key], ensure_ascii=True)])


def _read_json(path: Path) -> Sections:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Invalid JSON in settings file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file must be a JSON object: {path}")

    if all(not isinstance(v, dict) for v in data.values()):
        return {DEFAULT_SECTION: data} if data else {}

    sections: Sections = {}
    for name, values in data.items():
        if not isinstance(values, dict):
            raise SettingsError(
                f"Settings section {name!r} in {path} must be an object, got {type(values).__name__}"
            )
        sections[name] = dict(values)
    return sections


def load_settings(path: Path) -> Sections:
    """Read a settings file into ``{section: {option: value}}``."""
    if not path.exists():
        raise SettingsError(f"Settings file not found: {path}")
    if path.suffix.lower() == ".csv":
        return _read_csv(path)
    return _read_json(path)


def save_settings(
    path: Path,
    settings: dict[str, Any],
    *,
    command: str | None = None,
) -> None:
    """
    Store `settings` under `command` (or the default section).

    Sections for other commands already in the file are kept, for both json
    and csv. An unreadable existing file is overwritten.
    """
    sections: Sections = {}
    if path.exists():
        try:
            sections = load_settings(path)
        except SettingsError:
            sections = {}
    sections[command or DEFAULT_SECTION] = dict(settings)

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".csv":
        _write_csv(path, sections)
        return
    with path.open("w", encoding="utf-8") as handle:
        json.dump(sections, handle, indent=2, sort_keys=True, ensure_ascii=True)
        handle.write("\n")


def select_settings(sections: Sections, command: str | None) -> dict[str, Any]:
    """Default section overlaid with the section for `command`."""
    merged = dict(sections.get(DEFAULT_SECTION, {}))
    if command and command != DEFAULT_SECTION:
        merged.update(sections.get(command, {}))
    return merged


def build_default_map(sections: Sections, commands: list[str]) -> dict[str, dict[str, Any]]:
    """
    Turn loaded settings into a click ``default_map`` keyed by subcommand.

    Keys use option parameter names (``low_sigma``); dashes are accepted and
    normalized.
    """
    out: dict[str, dict[str, Any]] = {}
    for name in commands:
        section = select_settings(sections, name)
        if section:
            out[name] = {k.replace("-", "_"): v for k, v in section.items()}
    return out
