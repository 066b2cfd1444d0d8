"""Lokaler Schlüssel-Wert-Speicher für Datensatz und Sitzung.

Jeder Schlüssel liegt als eigene JSON-Datei im Speicherverzeichnis.
Lesen schlägt "weich" fehl: Unlesbares ergibt None (geloggt), nie eine Ausnahme.
Schreibfehler werden geloggt und als StoreError festgehalten.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from config.schema import StorageConfig
from models.dataset import Dataset
from models.session import Identity, Role, Session

logger = logging.getLogger(__name__)


class StoreError(BaseModel):
    """Ein gemeldeter Schreibfehler des Speichers."""

    key: str
    message: str
    occurred_at: datetime


class LocalStore:
    """Persistiert den Datensatz und die Sitzung unter festen Schlüsseln."""

    def __init__(self, config: Optional[StorageConfig] = None) -> None:
        self.config = config or StorageConfig()
        self.directory = Path(self.config.directory)
        self.last_error: Optional[StoreError] = None

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    # ─── Rohzugriff ───

    def get_raw(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            logger.warning(f"Speicher: '{key}' nicht lesbar: {e}")
            return None

    def set_raw(self, key: str, text: str) -> bool:
        """Schreibt atomar (temporäre Datei + rename). False bei Fehler."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(text)
                os.replace(tmp_name, self._path(key))
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            self.last_error = StoreError(
                key=key, message=str(e), occurred_at=datetime.now(timezone.utc)
            )
            logger.error(f"Speicher: '{key}' konnte nicht geschrieben werden: {e}")
            return False
        return True

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Speicher: '{key}' konnte nicht gelöscht werden: {e}")

    def _load_json(self, key: str) -> Optional[Any]:
        raw = self.get_raw(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Speicher: '{key}' enthält kein gültiges JSON ({e}) – ignoriert")
            return None

    # ─── Datensatz ───

    def load(self) -> Optional[Dataset]:
        """Lädt den Datensatz. None wenn nicht vorhanden oder fehlerhaft."""
        doc = self._load_json(self.config.dataset_key)
        if doc is None:
            return None
        try:
            return Dataset.model_validate(doc)
        except ValidationError as e:
            logger.warning(
                f"Speicher: Datensatz '{self.config.dataset_key}' ungültig "
                f"({e.error_count()} Fehler) – ignoriert"
            )
            return None

    def save(self, dataset: Dataset) -> bool:
        """Schreibt den kompletten Datensatz (write-through)."""
        return self.set_raw(self.config.dataset_key, dataset.to_json())

    # ─── Sitzung ───

    def load_session(self) -> Session:
        """Lädt Rolle und Identität. Fehlendes/Unlesbares → anonymer Betrachter."""
        role_raw = self.get_raw(self.config.role_key)
        role = Role.VIEWER
        if role_raw is not None:
            try:
                role = Role(role_raw.strip())
            except ValueError:
                logger.warning(f"Speicher: unbekannte Rolle '{role_raw.strip()}' – viewer")

        identity = None
        user_doc = self._load_json(self.config.user_key)
        if user_doc is not None:
            try:
                identity = Identity.model_validate(user_doc)
            except ValidationError:
                logger.warning("Speicher: gespeicherte Identität ungültig – ignoriert")

        return Session(identity=identity, role=role)

    def save_session(self, session: Session) -> bool:
        ok = self.set_raw(self.config.role_key, session.role.value)
        if session.identity is None:
            self.remove(self.config.user_key)
        else:
            ok = self.set_raw(
                self.config.user_key,
                session.identity.model_dump_json(by_alias=True),
            ) and ok
        return ok
