"""Navigator-Kern: Zusammenführen, Koordinaten, Stundenfilter, Rollen, Zustand."""

from navigator.app_state import AppState, ImportReport
from navigator.coordinates import Rect, ScrollOffset, Size, percent_to_scroll_offset, point_to_percent
from navigator.errors import (
    CredentialError,
    DatasetImportError,
    FloorNotFoundError,
    NavigatorError,
    PermissionDeniedError,
    RoomNotFoundError,
    RoomNotPlacedError,
)
from navigator.merge import merge_rooms, merge_schedule
from navigator.schedule_filter import lessons_for_day, weekday_code
from navigator.session_guard import SessionGuard, identity_from_claims

__all__ = [
    "AppState",
    "ImportReport",
    "Rect",
    "ScrollOffset",
    "Size",
    "percent_to_scroll_offset",
    "point_to_percent",
    "CredentialError",
    "DatasetImportError",
    "FloorNotFoundError",
    "NavigatorError",
    "PermissionDeniedError",
    "RoomNotFoundError",
    "RoomNotPlacedError",
    "merge_rooms",
    "merge_schedule",
    "lessons_for_day",
    "weekday_code",
    "SessionGuard",
    "identity_from_claims",
]
