"""Dataset: Vollständiger Navigator-Datensatz (Etagen, Räume, Stundenplan)."""

import json
from typing import Optional

from pydantic import BaseModel, Field

from models.floor import Floor
from models.room import Room
from models.lesson import LessonSlot


class Dataset(BaseModel):
    """Einheit für Speicherung, Export und Import.

    JSON-Import ersetzt den Datensatz komplett, CSV-/Excel-Import wird
    inkrementell zusammengeführt (siehe navigator.merge).
    """

    floors: list[Floor] = Field(default_factory=list)
    rooms: list[Room] = Field(default_factory=list)
    schedule: list[LessonSlot] = Field(default_factory=list)

    # ─── Nachschlagen ───

    def room_map(self) -> dict[str, Room]:
        """Raum-ID → Raum."""
        return {r.id: r for r in self.rooms}

    def floor_map(self) -> dict[str, Floor]:
        """Etagen-ID → Etage."""
        return {f.id: f for f in self.floors}

    def get_room(self, room_id: str) -> Optional[Room]:
        return next((r for r in self.rooms if r.id == room_id), None)

    def get_floor(self, floor_id: str) -> Optional[Floor]:
        return next((f for f in self.floors if f.id == floor_id), None)

    def rooms_on_floor(self, floor_id: str) -> list[Room]:
        """Alle Räume einer Etage in Datensatz-Reihenfolge."""
        return [r for r in self.rooms if r.floor_id == floor_id]

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        unplaced = sum(1 for r in self.rooms if not r.is_placed)
        days = sorted({s.day for s in self.schedule})
        lines = [
            f"Etagen: {len(self.floors)}",
            f"Räume: {len(self.rooms)}"
            + (f" ({unplaced} ohne Position)" if unplaced else ""),
            f"Stunden: {len(self.schedule)}"
            + (f" ({', '.join(days)})" if days else ""),
        ]
        return "\n".join(lines)

    # ─── Serialisierung ───

    def to_document(self) -> dict:
        """Persistiertes Dokument im camelCase-Format."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_document(), indent=indent, ensure_ascii=False)
