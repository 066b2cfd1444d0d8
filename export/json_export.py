"""JSON-Export des kompletten Datensatzes."""

from pathlib import Path

from models.dataset import Dataset

DEFAULT_EXPORT_NAME = "school_navigator_export.json"


def resolve_output_path(output_path: Path, default_name: str, suffixes: tuple[str, ...]) -> Path:
    """Datei oder Verzeichnis → konkreter Dateipfad.

    Pfade ohne passende Endung gelten als Verzeichnis, auch wenn es noch nicht
    existiert. Das Verzeichnis wird angelegt.
    """
    output_path = Path(output_path)
    if output_path.is_dir() or output_path.suffix.lower() not in suffixes:
        output_path = output_path / default_name
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def export_json(dataset: Dataset, output_path: Path) -> Path:
    """Schreibt den Datensatz eingerückt (2 Leerzeichen, UTF-8) als Datei."""
    output_path = resolve_output_path(output_path, DEFAULT_EXPORT_NAME, (".json",))
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(dataset.to_json(indent=2))
        f.write("\n")
    return output_path
