from models.floor import Floor
from models.room import Room
from models.lesson import LessonSlot, WEEKDAYS
from models.session import Identity, Role, Session, SessionState
from models.dataset import Dataset

__all__ = [
    "Floor",
    "Room",
    "LessonSlot",
    "WEEKDAYS",
    "Identity",
    "Role",
    "Session",
    "SessionState",
    "Dataset",
]
