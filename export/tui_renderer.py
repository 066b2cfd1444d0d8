"""Gemeinsamer Renderer für die Terminal-Anzeige (Etagenkarte, Raum- und Stundenliste).

Wird von cmd_show, cmd_rooms_list und cmd_today (Rich) verwendet.
"""

from typing import TYPE_CHECKING, Optional

from navigator.coordinates import percent_to_cell

if TYPE_CHECKING:
    from models.dataset import Dataset
    from models.lesson import LessonSlot

MISSING_ROOM_LABEL = "Raum nicht gefunden"


def _marker_symbol(index: int) -> str:
    """1..9, danach a..z, danach '*'."""
    if index < 9:
        return str(index + 1)
    if index < 9 + 26:
        return chr(ord("a") + index - 9)
    return "*"


def render_floor_grid(
    dataset: "Dataset",
    floor_id: str,
    columns: int = 60,
    rows: int = 20,
    highlight: Optional[str] = None,
) -> tuple[list[str], list[tuple[str, str, str]]]:
    """Zeichnet die Räume einer Etage in ein Zeichenraster.

    Gibt (Rasterzeilen, Legende) zurück. Legende: (Symbol, Raum-ID, Name).
    Der hervorgehobene Raum bekommt '@'. Räume ohne Position fehlen im
    Raster, stehen aber mit Symbol '?' in der Legende.
    """
    grid = [[" "] * columns for _ in range(rows)]
    legend: list[tuple[str, str, str]] = []

    placed = 0
    for room in dataset.rooms_on_floor(floor_id):
        if not room.is_placed:
            legend.append(("?", room.id, room.name))
            continue
        symbol = "@" if room.id == highlight else _marker_symbol(placed)
        placed += 1
        col, row = percent_to_cell(room.x, room.y, columns, rows)
        # Bei Überlappung gewinnt der hervorgehobene Raum
        if grid[row][col] != "@":
            grid[row][col] = symbol
        legend.append((symbol, room.id, room.name))

    border = "+" + "-" * columns + "+"
    lines = [border] + ["|" + "".join(r) + "|" for r in grid] + [border]
    return lines, legend


def render_room_rows(dataset: "Dataset", floor_id: Optional[str] = None) -> list[list[str]]:
    """Tabellenzeilen [ID, Name, Etage, X, Y] für alle (oder eine Etage) Räume."""
    floor_names = {f.id: f.name for f in dataset.floors}
    rooms = dataset.rooms if floor_id is None else dataset.rooms_on_floor(floor_id)
    rows: list[list[str]] = []
    for room in rooms:
        floor_label = floor_names.get(room.floor_id, f"{room.floor_id} (?)")
        if room.is_placed:
            x, y = f"{room.x:g}", f"{room.y:g}"
        else:
            x = y = "—"
        rows.append([room.id, room.name, floor_label, x, y])
    return rows


def render_lesson_rows(
    lessons: list["LessonSlot"], dataset: "Dataset"
) -> list[list[str]]:
    """Tabellenzeilen [Zeit, Fach, Raum, Etage, Lehrkraft].

    Verweist eine Stunde auf einen unbekannten Raum, steht in der
    Etagen-Spalte 'Raum nicht gefunden'.
    """
    rows: list[list[str]] = []
    for lesson in lessons:
        room = dataset.get_room(lesson.room_id)
        if room is None:
            where = MISSING_ROOM_LABEL
        else:
            floor = dataset.get_floor(room.floor_id)
            where = floor.name if floor else room.floor_id
        rows.append([
            f"{lesson.time_start}–{lesson.time_end}",
            lesson.subject,
            lesson.room_id,
            where,
            lesson.teacher or "—",
        ])
    return rows
