"""JSON-Import des kompletten Datensatzes mit Schema-Prüfung.

Ergebnis ist entweder ein gültiger Dataset oder eine Fehlerliste –
ungültiges JSON gelangt nie in den laufenden Datensatz.
"""

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from models.dataset import Dataset


class JsonImportError(Exception):
    """JSON-Datei konnte nicht gelesen werden."""


class DatasetImportResult(BaseModel):
    """Entweder dataset (gültig) oder errors (ungültig)."""

    dataset: Optional[Dataset] = None
    errors: list[str] = []

    @property
    def is_valid(self) -> bool:
        return self.dataset is not None and not self.errors


def _format_validation_error(e: ValidationError) -> list[str]:
    messages = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "(Dokument)"
        messages.append(f"{loc}: {err['msg']}")
    return messages


def _duplicates(values: list[str]) -> list[str]:
    seen: set[str] = set()
    dups: list[str] = []
    for v in values:
        if v in seen and v not in dups:
            dups.append(v)
        seen.add(v)
    return dups


def parse_dataset_document(text: str) -> DatasetImportResult:
    """Prüft einen JSON-Text gegen das Datensatz-Schema.

    Fehler:
    - kein gültiges JSON / kein Objekt
    - Felder fehlen oder haben falschen Typ, Koordinaten außerhalb [0,100]
    - doppelte Etagen- oder Raum-IDs
    """
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        return DatasetImportResult(errors=[f"Ungültiges JSON: {e}"])

    if not isinstance(doc, dict):
        return DatasetImportResult(
            errors=[f"Erwartet ein JSON-Objekt, gefunden: {type(doc).__name__}"]
        )
    missing = [k for k in ("floors", "rooms", "schedule") if k not in doc]
    if missing:
        return DatasetImportResult(
            errors=[f"Pflichtfeld fehlt: {k}" for k in missing]
        )

    try:
        dataset = Dataset.model_validate(doc)
    except ValidationError as e:
        return DatasetImportResult(errors=_format_validation_error(e))

    errors = []
    for fid in _duplicates([f.id for f in dataset.floors]):
        errors.append(f"Etagen-ID '{fid}' mehrfach vorhanden")
    for rid in _duplicates([r.id for r in dataset.rooms]):
        errors.append(f"Raum-ID '{rid}' mehrfach vorhanden")
    if errors:
        return DatasetImportResult(errors=errors)

    return DatasetImportResult(dataset=dataset)


def read_dataset_file(path: Path) -> DatasetImportResult:
    """Liest und prüft eine exportierte JSON-Datei."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            text = f.read()
    except FileNotFoundError:
        raise JsonImportError(f"JSON-Datei nicht gefunden: {path}")
    except (OSError, UnicodeDecodeError) as e:
        raise JsonImportError(f"JSON-Datei nicht lesbar: {path} ({e})")
    return parse_dataset_document(text)
