from config.schema import (
    AuthConfig,
    MapConfig,
    NavigatorConfig,
    StorageConfig,
)
from models.dataset import Dataset
from models.floor import Floor
from models.room import Room
from models.lesson import LessonSlot


def default_config() -> NavigatorConfig:
    """Standard-Konfiguration (Demo-Passwort "admin123", eine Admin-Adresse)."""
    return NavigatorConfig(
        school_name="Muster-Schule",
        storage=StorageConfig(),
        auth=AuthConfig(),
        map=MapConfig(),
    )


def demo_dataset() -> Dataset:
    """Eingebauter Demo-Datensatz.

    Wird verwendet, wenn im Speicher noch nichts oder nur Unlesbares liegt:

    Etage 1  Erdgeschoss     A101 Informatik, A102 Mathematik
    Etage 2  Erster Stock    B201 Deutsch

    Montag: zwei Stunden in A101 und A102.
    """
    return Dataset(
        floors=[
            Floor(id="1", name="Erdgeschoss"),
            Floor(id="2", name="Erster Stock"),
        ],
        rooms=[
            Room(id="A101", name="Informatik", x=22, y=36, floor_id="1"),
            Room(id="A102", name="Mathematik", x=40, y=28, floor_id="1"),
            Room(id="B201", name="Deutsch", x=68, y=52, floor_id="2"),
        ],
        schedule=[
            LessonSlot(day="Mon", time_start="08:30", time_end="09:15",
                       subject="Informatik", room_id="A101", teacher="Ivanenko"),
            LessonSlot(day="Mon", time_start="09:25", time_end="10:10",
                       subject="Mathematik", room_id="A102", teacher="Petrenko"),
        ],
    )


# Spaltenköpfe der Import-Vorlage (erste Variante jedes Feldes)
ROOM_TEMPLATE_HEADERS = ["id", "name", "x", "y", "floor"]
SCHEDULE_TEMPLATE_HEADERS = ["day", "timeStart", "timeEnd", "subject", "roomId", "teacher"]
