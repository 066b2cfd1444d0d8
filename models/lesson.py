"""Datenmodell für eine Unterrichtsstunde im Wochenplan (Pydantic v2)."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


WEEKDAYS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class LessonSlot(BaseModel):
    """Eine Stunde: Wochentag, Zeitspanne, Fach, Raum, Lehrkraft.

    Identität beim Zusammenführen ist (room_id, time_start).
    room_id ist eine weiche Referenz – der Raum muss nicht existieren.
    Überlappende oder "verkehrte" Zeitspannen werden unverändert akzeptiert.
    """

    model_config = ConfigDict(populate_by_name=True)

    day: str                     # "Mon".."Sun"
    time_start: str = Field(
        validation_alias=AliasChoices("timeStart", "time_start"),
        serialization_alias="timeStart",
    )                            # "08:30"
    time_end: str = Field(
        validation_alias=AliasChoices("timeEnd", "time_end"),
        serialization_alias="timeEnd",
    )                            # "09:15"
    subject: str
    room_id: str = Field(
        validation_alias=AliasChoices("roomId", "room_id"),
        serialization_alias="roomId",
    )
    teacher: str = ""

    @property
    def merge_key(self) -> tuple[str, str]:
        return (self.room_id, self.time_start)
