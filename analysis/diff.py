"""Vergleich zweier Datensätze (Diff / Import-Bericht).

Macht sichtbar, was ein Import überschreibt – der einzige Ort, an dem
beim Zusammenführen unbemerkt Daten verloren gehen können.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.dataset import Dataset


@dataclass
class RoomChange:
    """Ein Raum, dessen Inhalt durch einen neuen Datensatz ersetzt wurde."""

    room_id: str
    old_name: str
    new_name: str
    position_changed: bool
    floor_changed: bool


@dataclass
class DatasetDiff:
    """Vollständiger Diff zwischen zwei Datensätzen."""

    floors_added: list[str] = field(default_factory=list)
    floors_removed: list[str] = field(default_factory=list)
    rooms_added: list[str] = field(default_factory=list)
    rooms_removed: list[str] = field(default_factory=list)
    rooms_replaced: list[RoomChange] = field(default_factory=list)
    lessons_added: list[tuple[str, str]] = field(default_factory=list)
    lessons_removed: list[tuple[str, str]] = field(default_factory=list)
    lessons_replaced: list[tuple[str, str]] = field(default_factory=list)

    def is_empty(self) -> bool:
        """Gibt True zurück wenn kein Unterschied gefunden wurde."""
        return not any((
            self.floors_added, self.floors_removed,
            self.rooms_added, self.rooms_removed, self.rooms_replaced,
            self.lessons_added, self.lessons_removed, self.lessons_replaced,
        ))

    def summary_lines(self) -> list[str]:
        lines = []
        if self.floors_added:
            lines.append(f"Etagen hinzugefügt: {', '.join(self.floors_added)}")
        if self.floors_removed:
            lines.append(f"Etagen entfernt: {', '.join(self.floors_removed)}")
        if self.rooms_added:
            lines.append(f"Räume neu: {', '.join(self.rooms_added)}")
        if self.rooms_replaced:
            lines.append(
                f"Räume überschrieben: {', '.join(c.room_id for c in self.rooms_replaced)}"
            )
        if self.rooms_removed:
            lines.append(f"Räume entfernt: {', '.join(self.rooms_removed)}")
        if self.lessons_added:
            lines.append(f"Stunden neu: {len(self.lessons_added)}")
        if self.lessons_replaced:
            lines.append(
                "Stunden überschrieben: "
                + ", ".join(f"{r}@{t}" for r, t in self.lessons_replaced)
            )
        if self.lessons_removed:
            lines.append(f"Stunden entfernt: {len(self.lessons_removed)}")
        return lines

    def to_dict(self) -> dict:
        """Serialisiert den Diff als Dictionary (für JSON-Ausgabe)."""
        return {
            "floors_added": self.floors_added,
            "floors_removed": self.floors_removed,
            "rooms_added": self.rooms_added,
            "rooms_removed": self.rooms_removed,
            "rooms_replaced": [
                {
                    "room_id": c.room_id,
                    "old_name": c.old_name,
                    "new_name": c.new_name,
                    "position_changed": c.position_changed,
                    "floor_changed": c.floor_changed,
                }
                for c in self.rooms_replaced
            ],
            "lessons_added": [list(k) for k in self.lessons_added],
            "lessons_removed": [list(k) for k in self.lessons_removed],
            "lessons_replaced": [list(k) for k in self.lessons_replaced],
        }

    def to_json(self, indent: int = 2) -> str:
        """Gibt den Diff als JSON-String zurück."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def diff_datasets(a: "Dataset", b: "Dataset") -> DatasetDiff:
    """Vergleicht zwei Datensätze (a = alt, b = neu).

    Räume werden über die ID verglichen, Stunden über (roomId, timeStart).
    "Ersetzt" heißt: Schlüssel in beiden vorhanden, Inhalt verschieden.
    """
    diff = DatasetDiff()

    # ── Etagen ───────────────────────────────────────────────────────────────
    floors_a = [f.id for f in a.floors]
    floors_b = [f.id for f in b.floors]
    diff.floors_added = [f for f in floors_b if f not in set(floors_a)]
    diff.floors_removed = [f for f in floors_a if f not in set(floors_b)]

    # ── Räume ────────────────────────────────────────────────────────────────
    rooms_a = a.room_map()
    rooms_b = b.room_map()
    diff.rooms_added = [rid for rid in rooms_b if rid not in rooms_a]
    diff.rooms_removed = [rid for rid in rooms_a if rid not in rooms_b]
    for rid, new in rooms_b.items():
        old = rooms_a.get(rid)
        if old is None or old == new:
            continue
        diff.rooms_replaced.append(RoomChange(
            room_id=rid,
            old_name=old.name,
            new_name=new.name,
            position_changed=(old.x, old.y) != (new.x, new.y),
            floor_changed=old.floor_id != new.floor_id,
        ))

    # ── Stunden ──────────────────────────────────────────────────────────────
    lessons_a = {s.merge_key: s for s in a.schedule}
    lessons_b = {s.merge_key: s for s in b.schedule}
    diff.lessons_added = [k for k in lessons_b if k not in lessons_a]
    diff.lessons_removed = [k for k in lessons_a if k not in lessons_b]
    diff.lessons_replaced = [
        k for k, s in lessons_b.items()
        if k in lessons_a and lessons_a[k] != s
    ]

    return diff
