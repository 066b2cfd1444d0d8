"""Prüfung eines Datensatzes auf Referenz- und Formatprobleme.

Weiche Referenzen (Stunde → Raum, Raum → Etage) sind erlaubt, werden hier
aber als Warnung gemeldet, damit die Anzeige damit umgehen kann.
"""

import re
from collections import Counter
from typing import Literal

from pydantic import BaseModel

from models.dataset import Dataset
from models.lesson import WEEKDAYS

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ValidationViolation(BaseModel):
    """Ein einzelnes gefundenes Problem."""

    severity: Literal["error", "warning"]
    check: str           # z.B. "room_unknown_floor"
    description: str
    entity: str          # room_id / floor_id / "roomId@timeStart"


class ValidationReport(BaseModel):
    """Ergebnis der Datensatz-Prüfung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    @property
    def errors(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "warning"]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ FEHLER GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(self.errors)} | Warnungen: {len(self.warnings)}"]
        console.print(Panel("\n".join(lines), title="Datensatz-Prüfung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Probleme gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Prüfung", width=22)
        table.add_column("Entität", width=16)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.check,
                v.entity,
                v.description,
            )
        console.print(table)


def validate_dataset(dataset: Dataset) -> ValidationReport:
    """Führt alle Prüfungen durch.

    Fehler:   doppelte Raum- oder Etagen-IDs, leere Raum-IDs.
    Warnungen: Raum auf unbekannter Etage, Raum ohne Position,
               Stunde in unbekanntem Raum, ungültiger Wochentag,
               Uhrzeit nicht im Format HH:MM, Ende vor Beginn.
    """
    violations: list[ValidationViolation] = []

    # ── Eindeutigkeit ────────────────────────────────────────────────────────
    for fid, n in Counter(f.id for f in dataset.floors).items():
        if n > 1:
            violations.append(ValidationViolation(
                severity="error", check="floor_duplicate_id", entity=fid,
                description=f"Etagen-ID {n}× vorhanden.",
            ))
    for rid, n in Counter(r.id for r in dataset.rooms).items():
        if n > 1:
            violations.append(ValidationViolation(
                severity="error", check="room_duplicate_id", entity=rid,
                description=f"Raum-ID {n}× vorhanden – nur ein Raum pro ID erlaubt.",
            ))

    # ── Räume ────────────────────────────────────────────────────────────────
    floor_ids = {f.id for f in dataset.floors}
    for room in dataset.rooms:
        if not room.id:
            violations.append(ValidationViolation(
                severity="error", check="room_empty_id", entity=room.name or "—",
                description="Raum ohne ID.",
            ))
        if room.floor_id not in floor_ids:
            violations.append(ValidationViolation(
                severity="warning", check="room_unknown_floor", entity=room.id,
                description=f"Etage '{room.floor_id}' existiert nicht.",
            ))
        if not room.is_placed:
            violations.append(ValidationViolation(
                severity="warning", check="room_unplaced", entity=room.id,
                description="Keine gültige Position – Marker wird nicht angezeigt.",
            ))

    # ── Stunden ──────────────────────────────────────────────────────────────
    room_ids = {r.id for r in dataset.rooms}
    for lesson in dataset.schedule:
        entity = f"{lesson.room_id}@{lesson.time_start}"
        if lesson.room_id not in room_ids:
            violations.append(ValidationViolation(
                severity="warning", check="lesson_unknown_room", entity=entity,
                description=f"Raum '{lesson.room_id}' nicht gefunden ({lesson.subject}).",
            ))
        if lesson.day not in WEEKDAYS:
            violations.append(ValidationViolation(
                severity="warning", check="lesson_invalid_day", entity=entity,
                description=f"Wochentag '{lesson.day}' unbekannt (erwartet: {', '.join(WEEKDAYS)}).",
            ))
        bad_times = [t for t in (lesson.time_start, lesson.time_end) if not _TIME_RE.match(t)]
        if bad_times:
            violations.append(ValidationViolation(
                severity="warning", check="lesson_time_format", entity=entity,
                description=(
                    f"Uhrzeit {', '.join(repr(t) for t in bad_times)} nicht im Format HH:MM "
                    "– Sortierung kann falsch sein."
                ),
            ))
        elif lesson.time_end < lesson.time_start:
            violations.append(ValidationViolation(
                severity="warning", check="lesson_inverted", entity=entity,
                description=f"Ende {lesson.time_end} liegt vor Beginn {lesson.time_start}.",
            ))

    has_errors = any(v.severity == "error" for v in violations)
    return ValidationReport(violations=violations, is_valid=not has_errors)
