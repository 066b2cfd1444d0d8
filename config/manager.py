"""Konfigurationsmanager: Laden, Speichern und Validieren der Navigator-Config.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import NavigatorConfig
from config.defaults import default_config

logger = logging.getLogger(__name__)

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120

# Kommagetrennte Admin-Adressen, überschreibt auth.admin_emails
ADMINS_ENV_VAR = "SCHOOL_NAVIGATOR_ADMINS"


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Schul-Navigator — Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "storage": (
        "Lokaler Speicher",
        "Eine JSON-Datei pro Schlüssel im angegebenen Verzeichnis.",
    ),
    "auth": (
        "Zugang",
        "Demo-Niveau: Passwort-Hash und E-Mail-Allowlist für die Admin-Rolle.\n"
        f"Die Allowlist kann per Umgebungsvariable {ADMINS_ENV_VAR} überschrieben werden.",
    ),
    "map": (
        "Karte",
        None,
    ),
}


def _admins_from_env() -> Optional[list[str]]:
    raw = os.environ.get(ADMINS_ENV_VAR)
    if raw is None:
        return None
    return [s.strip() for s in raw.split(",") if s.strip()]


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "navigator_config.yaml"

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else self.DEFAULT_CONFIG

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.path.exists()

    # ─── Laden ───

    def load(self) -> NavigatorConfig:
        """Lade Config aus YAML. Ohne Datei gelten die Defaults.

        Validiert automatisch via Pydantic.
        """
        if not self.path.exists():
            logger.info(f"Keine Konfiguration unter {self.path} – verwende Defaults")
            config = default_config()
        else:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = yaml.load(f)
            try:
                config = NavigatorConfig.model_validate(dict(raw or {}))
            except Exception as e:
                raise ValueError(
                    f"Konfigurationsdatei ungültig: {self.path}\n"
                    f"Pydantic-Fehler: {e}"
                ) from e

        admins = _admins_from_env()
        if admins is not None:
            logger.info(f"Admin-Allowlist aus {ADMINS_ENV_VAR}: {len(admins)} Adresse(n)")
            config = config.model_copy(update={
                "auth": config.auth.model_copy(update={"admin_emails": admins}),
            })
        return config

    # ─── Speichern ───

    def save(self, config: NavigatorConfig) -> None:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(self.path, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {self.path}")

    def _build_commented_yaml(self, config: NavigatorConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        if "auth" in cm:
            auth_map = CommentedMap(cm["auth"])
            auth_map.yaml_add_eol_comment(
                "python main.py setup zum Ändern", "admin_password_sha256"
            )
            cm["auth"] = auth_map

        return cm
