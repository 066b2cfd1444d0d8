"""Datenmodell für eine Etage (Pydantic v2)."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Floor(BaseModel):
    """Eine Etage mit optionalem Grundriss-Bild.

    Das Bild wird nur als serialisierbare Referenz (Pfad oder URL) gehalten.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str                                   # "1", "2", "k3x9ab"
    name: str                                 # "Erdgeschoss"
    map_image_ref: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("mapImageRef", "map", "map_image_ref"),
        serialization_alias="mapImageRef",
    )
