"""Zusammenführen importierter Datensätze nach Schlüssel.

Regel: Ergebnis = alle bisherigen Einträge, deren Schlüssel im Import NICHT
vorkommt (alte Reihenfolge), danach alle importierten Einträge (Import-
Reihenfolge). Ein importierter Eintrag ersetzt den alten vollständig –
es werden keine einzelnen Felder übernommen.

Zweimal derselbe Import ergibt dasselbe wie einmal.
"""

from typing import Callable, Hashable, Iterable, Sequence, TypeVar

from models.room import Room
from models.lesson import LessonSlot

T = TypeVar("T")


def merge_by_key(
    existing: Iterable[T],
    incoming: Sequence[T],
    key: Callable[[T], Hashable],
) -> list[T]:
    incoming_keys = {key(item) for item in incoming}
    kept = [item for item in existing if key(item) not in incoming_keys]
    return kept + list(incoming)


def shadowed_keys(
    existing: Iterable[T],
    incoming: Sequence[T],
    key: Callable[[T], Hashable],
) -> list[Hashable]:
    """Schlüssel bisheriger Einträge, die der Import überschreiben wird."""
    incoming_keys = {key(item) for item in incoming}
    return [key(item) for item in existing if key(item) in incoming_keys]


def dedupe_keep_last(items: Sequence[T], key: Callable[[T], Hashable]) -> list[T]:
    """Bei gleichem Schlüssel gewinnt der letzte Eintrag (an seiner Position)."""
    last_index = {key(item): i for i, item in enumerate(items)}
    return [item for i, item in enumerate(items) if last_index[key(item)] == i]


def room_key(room: Room) -> str:
    return room.id


def lesson_key(lesson: LessonSlot) -> tuple[str, str]:
    return lesson.merge_key


def merge_rooms(existing: Iterable[Room], incoming: Sequence[Room]) -> list[Room]:
    """Räume nach ID zusammenführen.

    Doppelte IDs innerhalb des Imports: der letzte Eintrag gewinnt, damit
    jede ID höchstens einmal im Datensatz vorkommt.
    """
    return merge_by_key(existing, dedupe_keep_last(incoming, room_key), room_key)


def merge_schedule(
    existing: Iterable[LessonSlot], incoming: Sequence[LessonSlot]
) -> list[LessonSlot]:
    """Stunden nach (roomId, timeStart) zusammenführen."""
    return merge_by_key(existing, incoming, lesson_key)
