"""Tabellen-Import: CSV-Text und Excel-Mappen → Räume und Stunden.

Die Normalisierung ist rein: gleiche Zeilen ergeben immer gleiche Datensätze,
unabhängig vom aktuellen Datensatz. Zusammengeführt wird in navigator.merge.
"""

import csv
import io
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, time
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from models.room import Room
from models.lesson import LessonSlot

logger = logging.getLogger(__name__)


class TabularImportError(Exception):
    """Fehler beim CSV- oder Excel-Import."""


# ─── Spalten-Synonyme (Reihenfolge = Priorität) ───────────────────────────────

ROOM_ID_KEYS = ("id", "room")
ROOM_NAME_KEYS = ("name", "title", "room")
ROOM_X_KEYS = ("x",)
ROOM_Y_KEYS = ("y",)
ROOM_FLOOR_KEYS = ("floor", "floorId")
DEFAULT_FLOOR_ID = "1"

LESSON_DAY_KEYS = ("day", "Day")
LESSON_START_KEYS = ("timeStart", "start")
LESSON_END_KEYS = ("timeEnd", "end")
LESSON_SUBJECT_KEYS = ("subject", "lesson")
LESSON_ROOM_KEYS = ("roomId", "room", "cabinet")
LESSON_TEACHER_KEYS = ("teacher",)

ROOMS_SHEET = "rooms"
SCHEDULE_SHEET = "schedule"

_DELIMITERS = ",;\t|"


def _cell_text(value: Any) -> str:
    """Zellwert → Text. Uhrzeiten als HH:MM, ganzzahlige Floats ohne '.0'."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.strftime("%H:%M")
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _resolve(row: Mapping[str, Any], keys: Iterable[str], default: str = "") -> str:
    """Erster Synonym-Schlüssel mit nicht-leerem Wert.

    Zuerst exakte Spaltennamen, danach ohne Groß-/Kleinschreibung.
    """
    keys = tuple(keys)
    for key in keys:
        text = _cell_text(row.get(key))
        if text:
            return text
    folded = {str(k).strip().casefold(): v for k, v in row.items() if k is not None}
    for key in keys:
        text = _cell_text(folded.get(key.casefold()))
        if text:
            return text
    return default


def parse_coordinate(raw: str) -> Optional[float]:
    """'12.5' / '12,5' → 12.5. Leer, nicht numerisch oder außerhalb [0,100] → None."""
    text = raw.strip().replace(",", ".")
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0 or value > 100:
        return None
    return value


# ─── Normalisierung ───────────────────────────────────────────────────────────

def normalize_room_rows(rows: Iterable[Mapping[str, Any]]) -> list[Room]:
    """Zeilen → Räume. Reihenfolge bleibt erhalten.

    Räume mit ungültigen Koordinaten bleiben erhalten, aber ohne Position.
    """
    rooms = []
    for row in rows:
        rooms.append(Room(
            id=_resolve(row, ROOM_ID_KEYS),
            name=_resolve(row, ROOM_NAME_KEYS),
            x=parse_coordinate(_resolve(row, ROOM_X_KEYS)),
            y=parse_coordinate(_resolve(row, ROOM_Y_KEYS)),
            floor_id=_resolve(row, ROOM_FLOOR_KEYS, DEFAULT_FLOOR_ID),
        ))
    return rooms


def normalize_schedule_rows(rows: Iterable[Mapping[str, Any]]) -> list[LessonSlot]:
    """Zeilen → Stunden. Reihenfolge bleibt erhalten, Werte werden nicht gedeutet."""
    return [
        LessonSlot(
            day=_resolve(row, LESSON_DAY_KEYS),
            time_start=_resolve(row, LESSON_START_KEYS),
            time_end=_resolve(row, LESSON_END_KEYS),
            subject=_resolve(row, LESSON_SUBJECT_KEYS),
            room_id=_resolve(row, LESSON_ROOM_KEYS),
            teacher=_resolve(row, LESSON_TEACHER_KEYS),
        )
        for row in rows
    ]


# ─── CSV ──────────────────────────────────────────────────────────────────────

def _sniff_delimiter(header_line: str) -> str:
    try:
        return csv.Sniffer().sniff(header_line, delimiters=_DELIMITERS).delimiter
    except csv.Error:
        return ","


def parse_delimited_text(text: str) -> list[dict[str, str]]:
    """CSV-Text mit Kopfzeile → Liste von Dicts.

    Trennzeichen wird aus der Kopfzeile erkannt (, ; Tab |).
    Leere Zeilen werden übersprungen, Werte getrimmt.
    """
    text = text.lstrip("\ufeff").strip()
    if not text:
        return []
    delimiter = _sniff_delimiter(text.splitlines()[0])
    reader = csv.DictReader(io.StringIO(text), delimiter=delimiter)
    if reader.fieldnames is None:
        return []
    rows = []
    for row in reader:
        cleaned = {
            k.strip(): (v.strip() if isinstance(v, str) else "")
            for k, v in row.items()
            if k is not None
        }
        if all(v == "" for v in cleaned.values()):
            continue
        rows.append(cleaned)
    return rows


def read_text_file(path: Path) -> str:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            return f.read()
    except FileNotFoundError:
        raise TabularImportError(f"Datei nicht gefunden: {path}")
    except (OSError, UnicodeDecodeError) as e:
        raise TabularImportError(f"Datei nicht lesbar: {path} ({e})")


# ─── EXCEL ────────────────────────────────────────────────────────────────────

@dataclass
class WorkbookRows:
    """Zeilen der gewählten Blätter einer Excel-Mappe."""

    rooms_sheet: Optional[str]
    schedule_sheet: Optional[str]
    rooms: list[dict[str, str]] = field(default_factory=list)
    schedule: list[dict[str, str]] = field(default_factory=list)


def _sheet_rows(sheet) -> list[dict[str, str]]:
    """Tabellenblatt → Liste von Dicts (erste Zeile = Header)."""
    rows = list(sheet.iter_rows(values_only=True))
    if not rows:
        return []
    headers = [
        _cell_text(h) if h is not None else f"col_{i}"
        for i, h in enumerate(rows[0])
    ]
    result = []
    for row in rows[1:]:
        if all(v is None or _cell_text(v) == "" for v in row):
            continue
        result.append({
            headers[i]: _cell_text(v)
            for i, v in enumerate(row)
            if i < len(headers)
        })
    return result


def select_sheet_names(sheet_names: list[str]) -> tuple[Optional[str], Optional[str]]:
    """Wählt (Raum-Blatt, Stunden-Blatt).

    Bevorzugt Blätter namens 'rooms' / 'schedule', sonst erstes / zweites Blatt.
    Gibt es kein zweites Blatt, ist das Stunden-Blatt None. Ein namentlich
    gefundenes Blatt wird nie für die andere Rolle verwendet.
    """
    def by_name(wanted: str) -> Optional[str]:
        for sn in sheet_names:
            if sn.strip().lower() == wanted:
                return sn
        return None

    rooms = by_name(ROOMS_SHEET)
    schedule = by_name(SCHEDULE_SHEET)
    rest = [sn for sn in sheet_names if sn not in (rooms, schedule)]
    if rooms is None and rest:
        rooms = rest.pop(0)
    if schedule is None and rest:
        schedule = rest.pop(0)
    return rooms, schedule


def read_workbook(path: Path) -> WorkbookRows:
    """Liest eine .xlsx-Mappe und liefert die Zeilen der gewählten Blätter."""
    path = Path(path)
    if path.suffix.lower() not in (".xlsx", ".xlsm"):
        raise TabularImportError(
            f"Unbekanntes Dateiformat: {path.name}. Erwartet: .xlsx"
        )
    try:
        import openpyxl
        wb = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
    except FileNotFoundError:
        raise TabularImportError(f"Datei nicht gefunden: {path}")
    except Exception as e:
        raise TabularImportError(f"Fehler beim Öffnen der Excel-Datei: {e}")

    try:
        rooms_name, schedule_name = select_sheet_names(list(wb.sheetnames))
        if rooms_name is None:
            raise TabularImportError(f"Excel-Datei enthält kein Raum-Blatt: {path}")
        result = WorkbookRows(rooms_sheet=rooms_name, schedule_sheet=schedule_name)
        result.rooms = _sheet_rows(wb[rooms_name])
        if schedule_name is not None:
            result.schedule = _sheet_rows(wb[schedule_name])
        else:
            logger.info(f"{path.name}: kein Stundenplan-Blatt – Stundenimport übersprungen")
    finally:
        wb.close()
    return result
