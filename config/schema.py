import hashlib
from typing import Optional

from pydantic import BaseModel, Field, model_validator


DEFAULT_ADMIN_PASSWORD = "admin123"


def hash_password(password: str) -> str:
    """SHA-256 (hex) eines Passworts, wie in der Config abgelegt."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


# ─── SPEICHER ───

class StorageConfig(BaseModel):
    """Lokaler Schlüssel-Wert-Speicher (eine JSON-Datei pro Schlüssel)."""
    # Verzeichnis, in dem die Schlüssel-Dateien liegen
    directory: str = Field("output/local_storage",
        description="Verzeichnis des lokalen Speichers")
    # Schlüssel für den kompletten Datensatz (Etagen, Räume, Stundenplan)
    dataset_key: str = Field("school_navigator_v1",
        description="Schlüssel für den Datensatz")
    # Schlüssel für die Rolle (viewer/admin)
    role_key: str = Field("sn_role",
        description="Schlüssel für die Rolle")
    # Schlüssel für die angemeldete Identität
    user_key: str = Field("sn_user",
        description="Schlüssel für die Identität")

    @model_validator(mode='after')
    def _keys_distinct(self):
        keys = [self.dataset_key, self.role_key, self.user_key]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Speicher-Schlüssel müssen verschieden sein: {keys}")
        return self


# ─── ZUGANG ───

class AuthConfig(BaseModel):
    """Zugangs-Konfiguration (Demo-Niveau, keine echte Authentifizierung).

    Das Admin-Passwort wird nur als SHA-256-Hash abgelegt.
    Default-Passwort: "admin123".
    """
    # SHA-256 des Admin-Passworts (hex)
    admin_password_sha256: str = Field(
        default_factory=lambda: hash_password(DEFAULT_ADMIN_PASSWORD),
        description="SHA-256-Hash des Admin-Passworts")
    # E-Mail-Adressen, die bei Anmeldung automatisch Admin werden
    admin_emails: list[str] = Field(
        default=["admin@school.example.com"],
        description="Admin-Allowlist (E-Mail)")
    # Client-ID des Identity-Providers (nur Anzeige, wird nicht geprüft)
    identity_client_id: Optional[str] = Field(None,
        description="OAuth Client-ID des Identity-Providers")

    @property
    def identity_configured(self) -> bool:
        return bool(self.identity_client_id) and "REPLACE_WITH" not in self.identity_client_id


# ─── KARTE ───

class MapConfig(BaseModel):
    """Karten-Darstellung: Zoom und Terminal-Raster."""
    # Etage, die beim Start aktiv ist (Fallback: erste Etage)
    default_floor_id: str = Field("1",
        description="Etage beim Start")
    # Kleinster Zoomfaktor
    zoom_min: float = Field(0.5, gt=0,
        description="Minimaler Zoom")
    # Größter Zoomfaktor
    zoom_max: float = Field(3.0, gt=0,
        description="Maximaler Zoom")
    # Multiplikator pro Zoom-Schritt
    zoom_step: float = Field(1.2, gt=1.0,
        description="Zoom-Faktor pro Schritt")
    # Breite der Terminal-Minikarte in Zeichen
    grid_width: int = Field(60, ge=10, le=240,
        description="Breite der Minikarte (Zeichen)")
    # Höhe der Terminal-Minikarte in Zeilen
    grid_height: int = Field(20, ge=5, le=120,
        description="Höhe der Minikarte (Zeilen)")

    @model_validator(mode='after')
    def _zoom_bounds(self):
        if self.zoom_min > self.zoom_max:
            raise ValueError(
                f"zoom_min ({self.zoom_min}) > zoom_max ({self.zoom_max})")
        return self


# ─── GESAMT-CONFIG ───

class NavigatorConfig(BaseModel):
    """Gesamtkonfiguration des Schul-Navigators."""
    # Name der Schule (Anzeige)
    school_name: str = Field("Muster-Schule",
        description="Name der Schule")
    # Lokaler Speicher
    storage: StorageConfig = Field(default_factory=StorageConfig)
    # Admin-Passwort und Allowlist
    auth: AuthConfig = Field(default_factory=AuthConfig)
    # Zoom und Minikarte
    map: MapConfig = Field(default_factory=MapConfig)
