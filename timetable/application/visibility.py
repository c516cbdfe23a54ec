"""Visibility filter and per-session calendar view state"""
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from timetable.domain.event import Event, Subject


def default_visible_colors(subjects: Iterable[Subject]) -> set[str]:
    """Colors of the subjects currently marked active."""
    return {s.color for s in subjects if s.is_active}


def is_color_visible(color: str | None, active_colors: set[str]) -> bool:
    # colorless events are always shown
    if not color:
        return True
    return color in active_colors


def filter_visible_events(events: Iterable[Event], active_colors: Iterable[str]) -> list[Event]:
    active = set(active_colors)
    return [e for e in events if is_color_visible(e.color, active)]


@dataclass
class CalendarViewState:
    """
    What one calendar session is looking at.

    Created at session start and thrown away on reload; nothing here is
    persisted. Replacing the subject list resets the visible colors to the
    active subjects' colors.
    """
    current_date: date = field(default_factory=date.today)
    subjects: list[Subject] = field(default_factory=list)
    visible_colors: set[str] = field(default_factory=set)

    def __post_init__(self):
        if self.subjects and not self.visible_colors:
            self.visible_colors = default_visible_colors(self.subjects)

    def set_subjects(self, subjects: Iterable[Subject]) -> None:
        self.subjects = list(subjects)
        self.visible_colors = default_visible_colors(self.subjects)

    def set_current_date(self, value: date) -> None:
        self.current_date = value

    def toggle_color(self, color: str) -> bool:
        """Flip membership of `color`; returns True if it is now visible."""
        if color in self.visible_colors:
            self.visible_colors.discard(color)
            return False
        self.visible_colors.add(color)
        return True

    def is_color_visible(self, color: str | None) -> bool:
        return is_color_visible(color, self.visible_colors)

    def visible(self, events: Iterable[Event]) -> list[Event]:
        return filter_visible_events(events, self.visible_colors)
