"""Datenmodell für einen Raum (Pydantic v2)."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Room(BaseModel):
    """Ein Raum-Marker auf dem Grundriss einer Etage.

    x/y sind Prozentwerte relativ zum Etagenbild. None = noch nicht platziert.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str                                          # "A101" – eindeutig im gesamten Datensatz
    name: str                                        # "Informatik"
    x: Optional[float] = Field(None, ge=0, le=100)
    y: Optional[float] = Field(None, ge=0, le=100)
    floor_id: str = Field(
        validation_alias=AliasChoices("floorId", "floor", "floor_id"),
        serialization_alias="floorId",
    )

    @property
    def is_placed(self) -> bool:
        """True wenn beide Koordinaten gesetzt sind."""
        return self.x is not None and self.y is not None
