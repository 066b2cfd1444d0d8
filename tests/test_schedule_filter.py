"""Tests für den Filter "heutige Stunden"."""

from datetime import date

from models.lesson import LessonSlot
from navigator.schedule_filter import lessons_for_day, matches_query, weekday_code


def _slot(day: str, start: str, subject: str = "Mathe", room: str = "A1",
          teacher: str = "") -> LessonSlot:
    return LessonSlot(day=day, time_start=start, time_end="23:00",
                      subject=subject, room_id=room, teacher=teacher)


SCHEDULE = [
    _slot("Tue", "08:00", "Sport"),
    _slot("Mon", "10:00", "Physik", "B2", "Weber"),
    _slot("Mon", "08:00", "Deutsch", "A1", "Müller"),
    _slot("Mon", "09:00", "Englisch", "A2", "Müller"),
    _slot("Mon", "08:00", "Chemie", "C3", "Schulz"),
]


class TestLessonsForDay:
    def test_only_day_sorted(self):
        """Nur Montag, aufsteigend nach Beginn."""
        result = lessons_for_day(SCHEDULE, "Mon")
        assert all(s.day == "Mon" for s in result)
        starts = [s.time_start for s in result]
        assert starts == sorted(starts)
        assert len(result) == 4

    def test_stable_for_equal_start(self):
        """Gleiche Beginnzeit → Reihenfolge wie in der Eingabe."""
        result = lessons_for_day(SCHEDULE, "Mon")
        assert [s.subject for s in result[:2]] == ["Deutsch", "Chemie"]

    def test_query_case_insensitive(self):
        result = lessons_for_day(SCHEDULE, "Mon", "müller")
        assert [s.subject for s in result] == ["Deutsch", "Englisch"]

    def test_query_matches_room(self):
        assert [s.subject for s in lessons_for_day(SCHEDULE, "Mon", "b2")] == ["Physik"]

    def test_no_lessons(self):
        assert lessons_for_day(SCHEDULE, "Sun") == []

    def test_input_unchanged(self):
        before = list(SCHEDULE)
        lessons_for_day(SCHEDULE, "Mon", "x")
        assert SCHEDULE == before


class TestHelpers:
    def test_weekday_code(self):
        assert weekday_code(date(2024, 9, 2)) == "Mon"
        assert weekday_code(date(2024, 9, 8)) == "Sun"

    def test_matches_query_subject(self):
        assert matches_query(_slot("Mon", "08:00", "Informatik"), "INFO")
        assert not matches_query(_slot("Mon", "08:00", "Informatik"), "Kunst")
