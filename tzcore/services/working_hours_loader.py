# tzcore/services/working_hours_loader.py
from __future__ import annotations

import logging
import re
from datetime import time
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from tzcore.core.errors import WorkingHoursConfigError
from tzcore.schemas.working_hours import WEEKDAY_NAMES, DaySchedule, WorkingHoursConfig

logger = logging.getLogger(__name__)

_SECTIONS = ("default", "weekend", *WEEKDAY_NAMES)
_HHMM = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def _parse_time(value: Any, where: str, issues: list[str]) -> time | None:
    """
    Accept "HH:MM" strings and the integers YAML 1.1 produces for unquoted
    sexagesimal values (`12:00` loads as 720).
    """
    if value is None:
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value < 24 * 60:
            return time(value // 60, value % 60)
    elif isinstance(value, str):
        match = _HHMM.match(value.strip())
        if match:
            return time(int(match.group(1)), int(match.group(2)))
    issues.append(f"{where}: invalid time {value!r} (expected HH:MM)")
    return None


def _parse_schedule(name: str, raw: Any, issues: list[str]) -> dict[str, Any] | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        issues.append(f"{name}: expected a mapping, got {type(raw).__name__}")
        return None

    schedule: dict[str, Any] = {"enabled": raw.get("enabled", True)}
    for key in ("start", "end"):
        if key in raw:
            schedule[key] = _parse_time(raw[key], f"{name}.{key}", issues)

    breaks = []
    for index, item in enumerate(raw.get("breaks") or []):
        where = f"{name}.breaks[{index}]"
        if not isinstance(item, dict):
            issues.append(f"{where}: expected a mapping")
            continue
        start = _parse_time(item.get("start"), f"{where}.start", issues)
        end = _parse_time(item.get("end"), f"{where}.end", issues)
        if start is None or end is None:
            if "start" not in item or "end" not in item:
                issues.append(f"{where}: start and end are required")
            continue
        block = {"name": item.get("name") or f"Break {index + 1}", "start": start, "end": end}
        if item.get("type") is not None:
            block["type"] = str(item["type"]).lower()
        breaks.append(block)
    schedule["breaks"] = breaks
    return schedule


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def find_config_issues(config: WorkingHoursConfig) -> list[str]:
    """
    Report configuration that the validator would silently skip.

    Rules
    -----
    - Working hours with start at or after end.
    - A break with start at or after end.
    - Two breaks of the same schedule that overlap.
    """
    issues: list[str] = []
    for section in _SECTIONS:
        schedule: DaySchedule | None = getattr(config, section)
        if schedule is None:
            continue

        if schedule.start is not None and schedule.end is not None and schedule.end <= schedule.start:
            issues.append(
                f"{section}: working hours end {schedule.end:%H:%M} is not after start {schedule.start:%H:%M}"
            )

        valid = []
        for block in schedule.breaks:
            if block.end <= block.start:
                issues.append(
                    f"{section}: break {block.name!r} end {block.end:%H:%M} is not after start {block.start:%H:%M}"
                )
            else:
                valid.append(block)

        valid.sort(key=lambda b: b.start)
        for earlier, later in zip(valid, valid[1:]):
            if _minutes(later.start) < _minutes(earlier.end):
                issues.append(f"{section}: breaks {earlier.name!r} and {later.name!r} overlap")
    return issues


def parse_working_hours(text: str) -> WorkingHoursConfig:
    """
    Parse a YAML document into a WorkingHoursConfig.

    The document either holds a top-level `working_hours` mapping or is that
    mapping itself. Every problem found is collected and reported at once.

    Raises
    ------
    WorkingHoursConfigError
        Invalid YAML, unknown sections, bad times or inconsistent schedules.
    """
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise WorkingHoursConfigError([f"invalid YAML: {exc}"]) from exc

    if document is None:
        return WorkingHoursConfig()
    if not isinstance(document, dict):
        raise WorkingHoursConfigError(["document root must be a mapping"])

    section_map = document.get("working_hours", document)
    if section_map is None:
        return WorkingHoursConfig()
    if not isinstance(section_map, dict):
        raise WorkingHoursConfigError(["working_hours must be a mapping"])

    issues: list[str] = []
    data: dict[str, Any] = {}
    for key, raw in section_map.items():
        name = str(key).lower()
        if name not in _SECTIONS:
            issues.append(f"unknown section {key!r}")
            continue
        schedule = _parse_schedule(name, raw, issues)
        if schedule is not None:
            data[name] = schedule

    if issues:
        raise WorkingHoursConfigError(issues)

    try:
        config = WorkingHoursConfig.model_validate(data)
    except ValidationError as exc:
        raise WorkingHoursConfigError(
            [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
        ) from exc

    issues = find_config_issues(config)
    if issues:
        raise WorkingHoursConfigError(issues)
    return config


def load_working_hours(source: str | Path) -> WorkingHoursConfig:
    """
    Load working hours from a YAML file (`Path`) or YAML text (`str`).
    """
    if isinstance(source, Path):
        logger.info("Loading working hours from %s", source)
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise WorkingHoursConfigError([f"cannot read {source}: {exc}"]) from exc
        return parse_working_hours(text)
    return parse_working_hours(source)
