"""Tests für den Tabellen-Import (CSV-Text und Excel-Mappen)."""

from datetime import time
from pathlib import Path

import pytest

from data.tabular_import import (
    TabularImportError,
    normalize_room_rows,
    normalize_schedule_rows,
    parse_coordinate,
    parse_delimited_text,
    read_text_file,
    read_workbook,
    select_sheet_names,
)
from models.lesson import LessonSlot
from models.room import Room


def _write_workbook(path: Path, sheets: dict[str, list[list]]) -> Path:
    from openpyxl import Workbook
    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets.items():
        ws = wb.create_sheet(title)
        for row in rows:
            ws.append(row)
    wb.save(path)
    return path


# ─── NORMALISIERUNG ───────────────────────────────────────────────────────────

class TestNormalizeRooms:
    def test_synonyms_and_coercion(self):
        """room/title/x/y/floor → Room mit Zahlen-Koordinaten."""
        rooms = normalize_room_rows([
            {"room": "A101", "title": "Math", "x": "10", "y": "20", "floor": "1"},
        ])
        assert rooms == [Room(id="A101", name="Math", x=10, y=20, floor_id="1")]

    def test_pure(self):
        """Gleiche Zeilen ergeben immer dasselbe Ergebnis."""
        rows = [{"id": "B1", "name": "Bio", "x": "5,5", "y": "7", "floorId": "2"}]
        assert normalize_room_rows(rows) == normalize_room_rows(rows)
        assert normalize_room_rows(rows)[0].x == 5.5

    def test_default_floor(self):
        rooms = normalize_room_rows([{"id": "A1", "name": "X", "x": "1", "y": "1"}])
        assert rooms[0].floor_id == "1"

    def test_case_insensitive_headers(self):
        rooms = normalize_room_rows([{"ID": "A1", "Name": "X", "X": "1", "Y": "2", "Floor": "3"}])
        assert rooms[0].id == "A1"
        assert rooms[0].floor_id == "3"

    @pytest.mark.parametrize("raw", ["", "abc", "-1", "100.5", "nan", "inf"])
    def test_invalid_coordinates_unplaced(self, raw: str):
        """Ungültige Koordinaten → Raum bleibt, aber ohne Position."""
        rooms = normalize_room_rows([{"id": "A1", "name": "X", "x": raw, "y": "50"}])
        assert len(rooms) == 1
        assert rooms[0].x is None
        assert not rooms[0].is_placed

    def test_order_preserved(self):
        rows = [{"id": str(i), "name": "R", "x": "1", "y": "1"} for i in range(5)]
        assert [r.id for r in normalize_room_rows(rows)] == ["0", "1", "2", "3", "4"]


class TestNormalizeSchedule:
    def test_synonyms(self):
        lessons = normalize_schedule_rows([
            {"Day": "Mon", "start": "08:30", "end": "09:15",
             "lesson": "Informatik", "cabinet": "A101", "teacher": "Ivanenko"},
        ])
        assert lessons == [LessonSlot(day="Mon", time_start="08:30", time_end="09:15",
                                      subject="Informatik", room_id="A101",
                                      teacher="Ivanenko")]

    def test_values_kept_raw(self):
        """Wochentag und Uhrzeit werden nicht gedeutet."""
        lessons = normalize_schedule_rows([
            {"day": "Montag", "timeStart": "8:30", "timeEnd": "7:00",
             "subject": "X", "roomId": "Z9"},
        ])
        assert lessons[0].day == "Montag"
        assert lessons[0].time_start == "8:30"
        assert lessons[0].teacher == ""


class TestParseCoordinate:
    def test_decimal_comma(self):
        assert parse_coordinate("12,75") == 12.75

    def test_bounds_inclusive(self):
        assert parse_coordinate("0") == 0.0
        assert parse_coordinate("100") == 100.0


# ─── CSV ──────────────────────────────────────────────────────────────────────

class TestDelimitedText:
    def test_comma(self):
        rows = parse_delimited_text("id,name,x,y\nA1,Aula,10,20\n")
        assert rows == [{"id": "A1", "name": "Aula", "x": "10", "y": "20"}]

    def test_semicolon_and_bom(self):
        """Excel-CSV: BOM und Semikolon."""
        rows = parse_delimited_text("\ufeffid;name;x;y\nA1;Aula;10,5;20\n")
        assert rows[0]["id"] == "A1"
        assert normalize_room_rows(rows)[0].x == 10.5

    def test_tab(self):
        rows = parse_delimited_text("id\tname\nA1\tAula\n")
        assert rows == [{"id": "A1", "name": "Aula"}]

    def test_empty_lines_skipped(self):
        rows = parse_delimited_text("id,name\n\nA1,Aula\n,\n")
        assert len(rows) == 1

    def test_empty_text(self):
        assert parse_delimited_text("   ") == []

    def test_read_text_file_missing(self, tmp_path: Path):
        with pytest.raises(TabularImportError):
            read_text_file(tmp_path / "nope.csv")


# ─── EXCEL ────────────────────────────────────────────────────────────────────

class TestSheetSelection:
    def test_named_sheets_preferred(self):
        assert select_sheet_names(["Info", "Schedule", "Rooms"]) == ("Rooms", "Schedule")

    def test_positional_fallback(self):
        assert select_sheet_names(["Räume", "Plan"]) == ("Räume", "Plan")

    def test_single_sheet(self):
        assert select_sheet_names(["Tabelle1"]) == ("Tabelle1", None)

    def test_schedule_sheet_not_reused_for_rooms(self):
        """Ein Blatt namens 'schedule' wird nie als Raum-Blatt genommen."""
        assert select_sheet_names(["schedule"]) == (None, "schedule")
        assert select_sheet_names(["Schedule", "Tabelle2"]) == ("Tabelle2", "Schedule")

    def test_rooms_sheet_not_reused_for_schedule(self):
        assert select_sheet_names(["Rooms"]) == ("Rooms", None)

    def test_no_sheets(self):
        assert select_sheet_names([]) == (None, None)


class TestReadWorkbook:
    def test_rooms_and_schedule(self, tmp_path: Path):
        path = _write_workbook(tmp_path / "plan.xlsx", {
            "rooms": [["id", "name", "x", "y", "floor"],
                      ["A101", "Informatik", 22, 36.5, 1],
                      [None, None, None, None, None]],
            "schedule": [["day", "timeStart", "timeEnd", "subject", "roomId", "teacher"],
                         ["Mon", time(8, 30), time(9, 15), "Informatik", "A101", "Ivanenko"]],
        })
        wb_rows = read_workbook(path)
        rooms = normalize_room_rows(wb_rows.rooms)
        lessons = normalize_schedule_rows(wb_rows.schedule)
        assert rooms == [Room(id="A101", name="Informatik", x=22, y=36.5, floor_id="1")]
        assert lessons[0].time_start == "08:30"
        assert lessons[0].time_end == "09:15"

    def test_without_second_sheet(self, tmp_path: Path):
        """Nur ein Blatt → Stunden werden übersprungen."""
        path = _write_workbook(tmp_path / "rooms.xlsx", {
            "Tabelle1": [["room", "title", "x", "y"], ["A1", "Aula", 1, 2]],
        })
        wb_rows = read_workbook(path)
        assert wb_rows.schedule_sheet is None
        assert wb_rows.schedule == []
        assert normalize_room_rows(wb_rows.rooms)[0].name == "Aula"

    def test_only_schedule_sheet(self, tmp_path: Path):
        path = _write_workbook(tmp_path / "plan.xlsx", {
            "schedule": [["day", "timeStart"], ["Mon", "08:00"]],
        })
        with pytest.raises(TabularImportError, match="kein Raum-Blatt"):
            read_workbook(path)

    def test_wrong_suffix(self, tmp_path: Path):
        path = tmp_path / "plan.ods"
        path.write_bytes(b"")
        with pytest.raises(TabularImportError, match="Dateiformat"):
            read_workbook(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(TabularImportError):
            read_workbook(tmp_path / "fehlt.xlsx")
