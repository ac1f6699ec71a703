from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any

COUNTDOWN_WINDOW_DAYS = 30


@dataclass(slots=True)
class Countdown:
    days: int
    hours: int
    text: str
    urgent: bool
    critical: bool


def deadline_countdown(deadline: date, now: datetime | None = None) -> Countdown:
    now = now or datetime.now()
    remaining = datetime.combine(deadline, time.min) - now.replace(tzinfo=None)
    days = max(0, remaining.days)
    hours = remaining.seconds // 3600 if remaining.days >= 0 else 0

    if days == 0:
        return Countdown(days=0, hours=hours, text=f"{hours}h", urgent=True, critical=True)
    if days <= 7:
        return Countdown(days=days, hours=hours, text=f"{days}d {hours}h", urgent=True, critical=False)
    return Countdown(days=days, hours=hours, text=f"{days} days", urgent=False, critical=False)


def days_until(deadline: date | None, today: date | None = None) -> int | None:
    if deadline is None:
        return None
    return (deadline - (today or date.today())).days


def deadline_tone(days: int | None) -> str:
    if days is None:
        return "calm"
    if days <= 7:
        return "urgent"
    if days <= 30:
        return "soon"
    return "calm"


def kpi_cards(stats: dict[str, Any], today: date | None = None) -> list[dict[str, Any]]:
    total = stats["total_applications"]
    completed = stats["completed"]
    days_left = days_until(stats.get("next_deadline"), today)
    next_app = stats.get("next_deadline_application")
    completion = round(completed / total * 100) if total else 0

    return [
        {"title": "Total Applications", "value": total, "tone": "primary"},
        {
            "title": "Days to Deadline",
            "value": days_left if days_left is not None else "-",
            "subtitle": " ".join(next_app.university_name.split()[:2]) if next_app else "",
            "tone": deadline_tone(days_left),
        },
        {"title": "Completion Rate", "value": f"{completion}%", "progress": completion, "tone": "accent"},
        {"title": "In Progress", "value": stats["in_progress"], "tone": "purple"},
    ]
