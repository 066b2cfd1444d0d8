"""AppState: besitzt Datensatz und Sitzung, alle Änderungen laufen über update().

Jede Änderung liest das ganze Dokument, wendet eine Transformation an und
schreibt das ganze Dokument zurück. Wirft die Transformation, bleibt der
Datensatz unverändert und es wird nichts gespeichert.

Importe bekommen beim Start ein Ticket (Generationszähler). Beim Abschluss
wird nur das zuletzt gestartete Ticket angewendet; ältere, später fertig
werdende Importe werden verworfen. Ein Import, dessen Eingabe sich nicht
lesen lässt, verdrängt keine älteren.
"""

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from analysis.dataset_validator import ValidationReport, validate_dataset
from analysis.diff import DatasetDiff, diff_datasets
from config.defaults import demo_dataset
from config.schema import NavigatorConfig
from data.json_import import parse_dataset_document, read_dataset_file
from data.local_store import LocalStore, StoreError
from data.tabular_import import (
    normalize_room_rows,
    normalize_schedule_rows,
    parse_delimited_text,
    read_workbook,
)
from models.dataset import Dataset
from models.floor import Floor
from models.lesson import LessonSlot
from models.room import Room
from navigator.coordinates import (
    Rect,
    ScrollOffset,
    Size,
    percent_to_scroll_offset,
    point_to_percent,
    zoom_in,
    zoom_out,
    zoomed_size,
)
from navigator.errors import (
    DatasetImportError,
    FloorNotFoundError,
    NavigatorError,
    RoomNotFoundError,
    RoomNotPlacedError,
)
from navigator.merge import merge_rooms, merge_schedule, room_key, shadowed_keys
from navigator.schedule_filter import lessons_for_day, weekday_code
from navigator.session_guard import SessionGuard

logger = logging.getLogger(__name__)


def _checked(result):
    """Ungültiges Dokument → DatasetImportError."""
    if not result.is_valid:
        raise DatasetImportError(result.errors)
    return result


@dataclass
class ImportReport:
    """Ergebnis eines Imports: was kam herein, was wurde überschrieben."""

    source: str
    rooms_imported: int
    lessons_imported: int
    applied: bool
    diff: DatasetDiff
    validation: ValidationReport
    shadowed_rooms: list[str]
    schedule_skipped: bool = False

    def print_rich(self) -> None:
        """Gibt den Bericht formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if not self.applied:
            console.print(Panel(
                "[yellow]Import verworfen – ein neuerer Import wurde inzwischen gestartet.[/yellow]",
                title=f"Import: {self.source}", border_style="yellow",
            ))
            return

        lines = [f"Räume: {self.rooms_imported} | Stunden: {self.lessons_imported}"]
        if self.schedule_skipped:
            lines.append("[dim]Kein Stundenplan-Blatt – Stunden übersprungen.[/dim]")
        if self.shadowed_rooms:
            lines.append(
                f"[yellow]Überschrieben (gleiche ID): {', '.join(self.shadowed_rooms)}[/yellow]"
            )
        lines.extend(f"[dim]{l}[/dim]" for l in self.diff.summary_lines())
        warnings = len(self.validation.warnings)
        if warnings:
            lines.append(f"[yellow]{warnings} Warnung(en) – Details: python main.py validate[/yellow]")
        console.print(Panel("\n".join(lines), title=f"Import: {self.source}", border_style="cyan"))


class AppState:
    """Explizit besessener Anwendungszustand (Datensatz + Sitzung + Speicher)."""

    def __init__(
        self,
        config: NavigatorConfig,
        store: Optional[LocalStore] = None,
        dataset: Optional[Dataset] = None,
        guard: Optional[SessionGuard] = None,
    ) -> None:
        self.config = config
        self.store = store if store is not None else LocalStore(config.storage)
        if dataset is None:
            dataset = self.store.load()
            if dataset is None:
                logger.info("Kein gespeicherter Datensatz – verwende Demo-Daten")
                dataset = demo_dataset()
        self._dataset = dataset
        self.guard = guard if guard is not None else SessionGuard(config.auth, self.store)
        self.version = 0
        self.save_errors: list[StoreError] = []
        self._import_generation = 0
        self._abandoned_imports: set[int] = set()
        self._lock = threading.RLock()

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    # ─── Einziger Änderungs-Einstieg ───

    def update(self, transform: Callable[[Dataset], Dataset], reason: str = "") -> Dataset:
        """Wendet transform auf eine Kopie an und speichert das Ergebnis."""
        with self._lock:
            new = transform(self._dataset.model_copy(deep=True))
            self._dataset = new
            self.version += 1
            logger.debug(f"Datensatz v{self.version}: {reason}")
            self._persist()
            return new

    def _persist(self) -> None:
        if not self.store.save(self._dataset):
            err = self.store.last_error
            if err is not None:
                self.save_errors.append(err)

    # ─── Importe (Generationszähler) ───

    def begin_import(self) -> int:
        """Startet einen Import und gibt sein Ticket zurück."""
        with self._lock:
            self._import_generation += 1
            return self._import_generation

    def abandon_import(self, ticket: int) -> None:
        """Gescheiterter Import: sein Ticket verdrängt keine älteren mehr."""
        with self._lock:
            self._abandoned_imports.add(ticket)

    def _superseded(self, ticket: int) -> bool:
        return any(
            t not in self._abandoned_imports
            for t in range(ticket + 1, self._import_generation + 1)
        )

    def finish_import(
        self, ticket: int, transform: Callable[[Dataset], Dataset], reason: str = ""
    ) -> bool:
        """Wendet den Import an, wenn kein neuerer (nicht gescheiterter) gestartet wurde."""
        with self._lock:
            if ticket in self._abandoned_imports or self._superseded(ticket):
                logger.warning(
                    f"Import #{ticket} verworfen ({reason}) – "
                    f"neuerer Import #{self._import_generation} läuft"
                )
                return False
            self.update(transform, reason)
            return True

    def _apply_tabular(
        self,
        ticket: int,
        rooms: list[Room],
        lessons: list[LessonSlot],
        source: str,
        schedule_skipped: bool = False,
    ) -> ImportReport:
        before = self._dataset
        shadowed = [str(k) for k in shadowed_keys(before.rooms, rooms, room_key)]

        def transform(d: Dataset) -> Dataset:
            return d.model_copy(update={
                "rooms": merge_rooms(d.rooms, rooms),
                "schedule": merge_schedule(d.schedule, lessons),
            })

        applied = self.finish_import(ticket, transform, source)
        after = self._dataset
        if shadowed and applied:
            logger.info(f"{source}: {len(shadowed)} Raum/Räume überschrieben: {shadowed}")
        return ImportReport(
            source=source,
            rooms_imported=len(rooms),
            lessons_imported=len(lessons),
            applied=applied,
            diff=diff_datasets(before, after) if applied else DatasetDiff(),
            validation=validate_dataset(after),
            shadowed_rooms=shadowed if applied else [],
            schedule_skipped=schedule_skipped,
        )

    def _read_for_import(self, read: Callable[[], object]) -> tuple[int, object]:
        """Ticket ziehen und Eingabe lesen. Scheitert das Lesen, verfällt das Ticket."""
        ticket = self.begin_import()
        try:
            return ticket, read()
        except Exception:
            self.abandon_import(ticket)
            raise

    def import_rooms_text(self, text: str) -> ImportReport:
        """CSV-Text mit Räumen importieren und nach ID zusammenführen."""
        ticket, rooms = self._read_for_import(
            lambda: normalize_room_rows(parse_delimited_text(text)))
        return self._apply_tabular(ticket, rooms, [], "CSV Räume")

    def import_schedule_text(self, text: str) -> ImportReport:
        """CSV-Text mit Stunden importieren und nach (roomId, timeStart) zusammenführen."""
        ticket, lessons = self._read_for_import(
            lambda: normalize_schedule_rows(parse_delimited_text(text)))
        return self._apply_tabular(ticket, [], lessons, "CSV Stundenplan")

    def import_workbook(self, path: Path) -> ImportReport:
        """Excel-Mappe importieren: Blatt 'rooms'/1 → Räume, 'schedule'/2 → Stunden."""
        ticket, wb_rows = self._read_for_import(lambda: read_workbook(path))
        rooms = normalize_room_rows(wb_rows.rooms)
        lessons = normalize_schedule_rows(wb_rows.schedule)
        return self._apply_tabular(
            ticket, rooms, lessons, f"Excel {Path(path).name}",
            schedule_skipped=wb_rows.schedule_sheet is None,
        )

    def import_json_text(self, text: str, source: str = "JSON") -> ImportReport:
        """Ersetzt den Datensatz komplett. Ungültiges JSON → DatasetImportError."""
        ticket, result = self._read_for_import(
            lambda: _checked(parse_dataset_document(text)))
        return self._apply_json(ticket, result, source)

    def import_json_file(self, path: Path) -> ImportReport:
        ticket, result = self._read_for_import(
            lambda: _checked(read_dataset_file(path)))
        return self._apply_json(ticket, result, f"JSON {Path(path).name}")

    def _apply_json(self, ticket, result, source: str) -> ImportReport:
        before = self._dataset
        incoming = result.dataset
        applied = self.finish_import(ticket, lambda _d: incoming, source)
        after = self._dataset
        return ImportReport(
            source=source,
            rooms_imported=len(incoming.rooms),
            lessons_imported=len(incoming.schedule),
            applied=applied,
            diff=diff_datasets(before, after) if applied else DatasetDiff(),
            validation=validate_dataset(after),
            shadowed_rooms=[],
        )

    def export_json(self) -> str:
        """Ganzes Dokument als eingerücktes JSON."""
        return self._dataset.to_json(indent=2)

    def export_json_file(self, path: Path) -> Path:
        from export.json_export import export_json
        return export_json(self._dataset, path)

    # ─── Etagen ───

    def add_floor(self, name: str) -> Floor:
        name = name.strip()
        if not name:
            raise NavigatorError("Etagenname fehlt")
        existing = {f.id for f in self._dataset.floors}
        floor_id = secrets.token_hex(3)
        while floor_id in existing:
            floor_id = secrets.token_hex(3)
        floor = Floor(id=floor_id, name=name)
        self.update(
            lambda d: d.model_copy(update={"floors": d.floors + [floor]}),
            f"Etage hinzugefügt: {floor_id}",
        )
        return floor

    def set_floor_map(self, floor_id: str, map_image_ref: Optional[str]) -> Floor:
        """Grundriss-Referenz (Pfad/URL) einer Etage setzen oder entfernen."""
        if self._dataset.get_floor(floor_id) is None:
            raise FloorNotFoundError(floor_id)

        def transform(d: Dataset) -> Dataset:
            floors = [
                f.model_copy(update={"map_image_ref": map_image_ref}) if f.id == floor_id else f
                for f in d.floors
            ]
            return d.model_copy(update={"floors": floors})

        self.update(transform, f"Grundriss für Etage {floor_id}")
        return self._dataset.get_floor(floor_id)

    def resolve_floor_id(self, floor_id: Optional[str] = None) -> Optional[str]:
        """Gewünschte Etage, sonst Start-Etage aus der Config, sonst erste Etage.

        Eine ausdrücklich genannte, aber unbekannte Etage ist ein Fehler.
        """
        if floor_id:
            if self._dataset.get_floor(floor_id) is None:
                raise FloorNotFoundError(floor_id)
            return floor_id
        default = self.config.map.default_floor_id
        if default and self._dataset.get_floor(default) is not None:
            return default
        return self._dataset.floors[0].id if self._dataset.floors else None

    # ─── Räume ───

    def place_room(
        self,
        room_id: str,
        floor_id: str,
        x: float,
        y: float,
        name: Optional[str] = None,
    ) -> Room:
        """Raum an (x%, y%) setzen. Bestehender Raum behält seinen Namen."""
        room_id = room_id.strip()
        if not room_id:
            raise NavigatorError("Raum-ID fehlt")
        if self._dataset.get_floor(floor_id) is None:
            raise FloorNotFoundError(floor_id)
        x = round(min(100.0, max(0.0, x)), 2)
        y = round(min(100.0, max(0.0, y)), 2)

        def transform(d: Dataset) -> Dataset:
            if d.get_room(room_id) is not None:
                rooms = [
                    r.model_copy(update={"x": x, "y": y, "floor_id": floor_id})
                    if r.id == room_id else r
                    for r in d.rooms
                ]
            else:
                rooms = d.rooms + [Room(
                    id=room_id, name=name or room_id, x=x, y=y, floor_id=floor_id,
                )]
            return d.model_copy(update={"rooms": rooms})

        self.update(transform, f"Raum {room_id} platziert")
        return self._dataset.get_room(room_id)

    def place_room_at_pointer(
        self,
        room_id: str,
        floor_id: str,
        pointer_x: float,
        pointer_y: float,
        rect: Rect,
        name: Optional[str] = None,
    ) -> Room:
        """Wie place_room, aber aus einer Klick-Position im Kartencontainer."""
        x, y = point_to_percent(pointer_x, pointer_y, rect)
        return self.place_room(room_id, floor_id, x, y, name=name)

    def rename_room(self, room_id: str, name: str) -> Room:
        if self._dataset.get_room(room_id) is None:
            raise RoomNotFoundError(room_id)

        def transform(d: Dataset) -> Dataset:
            rooms = [r.model_copy(update={"name": name}) if r.id == room_id else r
                     for r in d.rooms]
            return d.model_copy(update={"rooms": rooms})

        self.update(transform, f"Raum {room_id} umbenannt")
        return self._dataset.get_room(room_id)

    def delete_room(self, room_id: str) -> Room:
        """Nur Admin. Stunden mit diesem Raum bleiben (weiche Referenz)."""
        self.guard.require_admin(f"Raum {room_id} löschen")
        room = self._dataset.get_room(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        self.update(
            lambda d: d.model_copy(update={"rooms": [r for r in d.rooms if r.id != room_id]}),
            f"Raum {room_id} gelöscht",
        )
        return room

    def reset_to_demo(self) -> None:
        """Nur Admin. Ersetzt den Datensatz durch die Demo-Daten."""
        self.guard.require_admin("Datensatz zurücksetzen")
        self.update(lambda _d: demo_dataset(), "Demo-Daten")

    # ─── Karte ───

    def step_zoom(self, zoom: float, steps: int) -> float:
        """Zoom um ganze Schritte ändern (positiv = hinein, negativ = heraus).

        Schrittweite und Grenzen kommen aus der Karten-Config.
        """
        mp = self.config.map
        for _ in range(abs(steps)):
            if steps > 0:
                zoom = zoom_in(zoom, mp.zoom_step, mp.zoom_max)
            else:
                zoom = zoom_out(zoom, mp.zoom_step, mp.zoom_min)
        return zoom

    def center_on_room(self, room_id: str, viewport: Size, zoom: float = 1.0) -> ScrollOffset:
        """Scroll-Position, die den Raum-Marker im Sichtfenster zentriert."""
        room = self._dataset.get_room(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        if not room.is_placed:
            raise RoomNotPlacedError(room_id)
        return percent_to_scroll_offset(room.x, room.y, zoomed_size(viewport, zoom), viewport)

    # ─── Stundenplan ───

    def lessons_for(self, day: str, query: str = "") -> list[LessonSlot]:
        return lessons_for_day(self._dataset.schedule, day, query)

    def lessons_for_today(self, query: str = "", today: Optional[date] = None) -> list[LessonSlot]:
        return self.lessons_for(weekday_code(today), query)

    def room_for_lesson(self, lesson: LessonSlot) -> Optional[Room]:
        """Raum einer Stunde oder None, wenn die Referenz ins Leere zeigt."""
        return self._dataset.get_room(lesson.room_id)
