"""Scheduled tasks feature.

Tasks are declared under ``schedules.tasks`` in the manifest::

    schedules:
      tasks:
        - command: analytics:prune
          schedule: {type: dailyAt, at: "03:30"}
        - command: analytics:sync
          cron: "*/5 * * * *"
          without_overlapping: true

Each valid task is translated to a five-field cron expression and handed
to the manager; running them is the host scheduler's job.
"""

import re
from dataclasses import dataclass
from typing import Any

from notur_core.features.base import ExtensionFeature, FeatureKind
from notur_core.features.context import ExtensionContext
from notur_core.logging import get_logger

DAYS = {
    "sun": 0, "sunday": 0,
    "mon": 1, "monday": 1,
    "tue": 2, "tues": 2, "tuesday": 2,
    "wed": 3, "wednesday": 3,
    "thu": 4, "thursday": 4,
    "fri": 5, "friday": 5,
    "sat": 6, "saturday": 6,
}

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

logger = get_logger("feature")


@dataclass(frozen=True)
class ScheduledTask:
    """One schedulable command declared by an extension."""

    extension_id: str
    command: str
    cron: str
    timezone: str | None = None
    without_overlapping: bool = False
    on_one_server: bool = False
    run_in_maintenance: bool = False
    label: str | None = None


def _parse_time(value: Any) -> tuple[int, int] | None:
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour, minute


def _parse_day(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value if 0 <= value <= 6 else None
    if isinstance(value, str):
        return DAYS.get(value.strip().lower())
    return None


def _parse_positive_int(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value if value > 0 else None
    if isinstance(value, str) and value.isdigit():
        number = int(value)
        return number if number > 0 else None
    return None


def schedule_to_cron(schedule: Any) -> str | None:
    """Translate a ``schedule`` mapping into a cron expression.

    Returns None for unknown types or missing/invalid arguments.
    """
    if not isinstance(schedule, dict):
        return None

    kind = str(schedule.get("type", "")).lower()

    if kind == "hourly":
        return "0 * * * *"
    if kind == "daily":
        return "0 0 * * *"
    if kind == "dailyat":
        time = _parse_time(schedule.get("at"))
        return f"{time[1]} {time[0]} * * *" if time else None
    if kind == "weeklyon":
        day = _parse_day(schedule.get("day"))
        time = _parse_time(schedule.get("at"))
        if day is None or time is None:
            return None
        return f"{time[1]} {time[0]} * * {day}"
    if kind == "everyminutes":
        interval = _parse_positive_int(schedule.get("interval"))
        return f"*/{interval} * * * *" if interval else None
    if kind == "everyhours":
        interval = _parse_positive_int(schedule.get("interval"))
        return f"0 */{interval} * * *" if interval else None

    return None


def parse_task(extension_id: str, task: Any) -> ScheduledTask | None:
    """Build a ScheduledTask, or None if the task is disabled or malformed."""
    if not isinstance(task, dict) or task.get("enabled", True) is False:
        return None

    command = task.get("command")
    if not isinstance(command, str) or not command:
        return None

    cron = task.get("cron")
    if not isinstance(cron, str) or not cron:
        cron = schedule_to_cron(task.get("schedule"))
    if cron is None:
        return None

    timezone = task.get("timezone")
    label = task.get("label")
    return ScheduledTask(
        extension_id=extension_id,
        command=command,
        cron=cron,
        timezone=timezone if isinstance(timezone, str) else None,
        without_overlapping=bool(task.get("without_overlapping")),
        on_one_server=bool(task.get("on_one_server")),
        run_in_maintenance=bool(task.get("run_in_maintenance")),
        label=label if isinstance(label, str) else None,
    )


class SchedulesFeature(ExtensionFeature):
    """Collects scheduled tasks declared in the manifest."""

    name = "schedules"
    kind = FeatureKind.SCHEDULES
    capability_id = "schedules"
    capability_version = 1
    enabled_by_default = False

    def supports(self, context: ExtensionContext) -> bool:
        return bool(context.manifest.schedule_tasks)

    def register(self, context: ExtensionContext) -> None:
        tasks: list[ScheduledTask] = []
        for index, raw in enumerate(context.manifest.schedule_tasks):
            task = parse_task(context.id, raw)
            if task is None:
                logger.warning(
                    "Skipping disabled or invalid scheduled task",
                    extension_id=context.id,
                    task_index=index,
                )
                continue
            tasks.append(task)

        context.manager.register_schedules(context.id, tasks)
