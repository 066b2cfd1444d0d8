"""Fehlerklassen des Navigators.

Keiner dieser Fehler ist fatal: die Operation wird abgebrochen, der
Datensatz bleibt unverändert.
"""


class NavigatorError(Exception):
    """Basis für alle gemeldeten Bedienfehler."""


class PermissionDeniedError(NavigatorError):
    """Aktion erfordert die Admin-Rolle."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Nur für Administratoren: {action}")
        self.action = action


class RoomNotFoundError(NavigatorError):
    def __init__(self, room_id: str) -> None:
        super().__init__(f"Raum nicht gefunden: {room_id}")
        self.room_id = room_id


class FloorNotFoundError(NavigatorError):
    def __init__(self, floor_id: str) -> None:
        super().__init__(f"Etage nicht gefunden: {floor_id}")
        self.floor_id = floor_id


class RoomNotPlacedError(NavigatorError):
    """Raum existiert, hat aber keine Position auf der Karte."""

    def __init__(self, room_id: str) -> None:
        super().__init__(f"Raum {room_id} hat keine Position auf der Karte")
        self.room_id = room_id


class CredentialError(NavigatorError):
    """Anmeldedaten des Identity-Providers unvollständig oder unlesbar."""


class DatasetImportError(NavigatorError):
    """Importierter Datensatz ist ungültig."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Ungültiger Datensatz:\n" + "\n".join(f"  • {e}" for e in errors))
        self.errors = errors
