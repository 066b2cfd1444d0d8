"""Filter "heutige Stunden": Wochentag, Freitext-Suche, Sortierung nach Beginn."""

from datetime import date
from typing import Iterable, Optional

from models.lesson import LessonSlot, WEEKDAYS


def weekday_code(day: Optional[date] = None) -> str:
    """Datum → "Mon".."Sun" (Default: heute)."""
    day = day or date.today()
    return WEEKDAYS[day.weekday()]


def matches_query(lesson: LessonSlot, query: str) -> bool:
    """Teilstring-Suche ohne Groß-/Kleinschreibung in Fach, Lehrkraft, Raum."""
    q = query.casefold()
    return (
        q in lesson.subject.casefold()
        or q in lesson.teacher.casefold()
        or q in lesson.room_id.casefold()
    )


def lessons_for_day(
    schedule: Iterable[LessonSlot], day: str, query: str = ""
) -> list[LessonSlot]:
    """Stunden eines Tages, optional gefiltert, aufsteigend nach time_start.

    Sortiert wird lexikographisch auf "HH:MM" – korrekt nur für
    zweistellige Stunden. sorted() ist stabil: gleiche Beginnzeiten
    behalten die Eingabe-Reihenfolge.
    """
    selected = [s for s in schedule if s.day == day]
    if query:
        selected = [s for s in selected if matches_query(s, query)]
    return sorted(selected, key=lambda s: s.time_start)
