"""Excel-Export des Datensatzes (openpyxl).

Schreibt zwei Blätter "rooms" und "schedule" mit denselben Spalten, die der
Import erwartet – eine exportierte Datei lässt sich also direkt wieder
einlesen. Zusätzlich ein Blatt "floors" (wird beim Import ignoriert).
"""

from pathlib import Path

from config.defaults import ROOM_TEMPLATE_HEADERS, SCHEDULE_TEMPLATE_HEADERS, demo_dataset
from export.json_export import resolve_output_path
from models.dataset import Dataset

DEFAULT_EXCEL_NAME = "school_navigator.xlsx"
DEFAULT_TEMPLATE_NAME = "school_navigator_vorlage.xlsx"
EXCEL_SUFFIXES = (".xlsx", ".xlsm")

COLORS = {
    "header":   "2F5496",
    "unplaced": "FCE4D6",
    "stripe":   "F2F2F2",
}


class ExcelExporter:
    """Exportiert einen Dataset in eine Excel-Datei."""

    COL_W_NARROW = 10
    COL_W_WIDE   = 24
    ROW_HEADER_H = 22

    def __init__(self, dataset: Dataset):
        self.dataset = dataset

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path, include_floors: bool = True) -> Path:
        """Erstellt die Excel-Datei. Gibt den tatsächlichen Pfad zurück."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_rooms(wb)
        self._sheet_schedule(wb)
        if include_floors:
            self._sheet_floors(wb)

        output_path = resolve_output_path(output_path, DEFAULT_EXCEL_NAME, EXCEL_SUFFIXES)
        wb.save(output_path)
        return output_path

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header_row(self, ws, headers: list[str]) -> None:
        from openpyxl.styles import Alignment, Font
        from openpyxl.utils import get_column_letter
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = border
            width = self.COL_W_WIDE if text in ("name", "subject", "teacher") else self.COL_W_NARROW
            ws.column_dimensions[get_column_letter(col)].width = width
        ws.row_dimensions[1].height = self.ROW_HEADER_H
        ws.freeze_panes = "A2"

    def _write_rows(self, ws, rows: list[list], highlight: set[int] = frozenset()) -> None:
        """Schreibt Datenzeilen ab Zeile 2; Zeilen-Indizes in highlight werden markiert."""
        border = self._thin_border()
        for i, values in enumerate(rows):
            excel_row = i + 2
            if i in highlight:
                fill = self._fill(COLORS["unplaced"])
            elif i % 2:
                fill = self._fill(COLORS["stripe"])
            else:
                fill = None
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=excel_row, column=col, value=value)
                cell.border = border
                if fill is not None:
                    cell.fill = fill

    # ─── Blätter ──────────────────────────────────────────────────────────────

    def _sheet_rooms(self, wb) -> None:
        ws = wb.create_sheet("rooms")
        self._write_header_row(ws, ROOM_TEMPLATE_HEADERS)
        rows = []
        unplaced = set()
        for i, room in enumerate(self.dataset.rooms):
            # Räume ohne Position bleiben in x/y leer
            rows.append([room.id, room.name, room.x, room.y, room.floor_id])
            if not room.is_placed:
                unplaced.add(i)
        self._write_rows(ws, rows, highlight=unplaced)

    def _sheet_schedule(self, wb) -> None:
        ws = wb.create_sheet("schedule")
        self._write_header_row(ws, SCHEDULE_TEMPLATE_HEADERS)
        rows = [
            [s.day, s.time_start, s.time_end, s.subject, s.room_id, s.teacher]
            for s in self.dataset.schedule
        ]
        self._write_rows(ws, rows)

    def _sheet_floors(self, wb) -> None:
        ws = wb.create_sheet("floors")
        self._write_header_row(ws, ["id", "name", "map"])
        rows = [[f.id, f.name, f.map_image_ref or ""] for f in self.dataset.floors]
        self._write_rows(ws, rows)


def generate_template(output_path: Path) -> Path:
    """Erzeugt eine Vorlage mit den Beispieldaten (rooms + schedule)."""
    output_path = resolve_output_path(output_path, DEFAULT_TEMPLATE_NAME, EXCEL_SUFFIXES)
    return ExcelExporter(demo_dataset()).export(output_path, include_floors=False)
