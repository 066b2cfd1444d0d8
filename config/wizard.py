"""Interaktiver Setup-Wizard für die Ersteinrichtung des Schul-Navigators.

Führt den Nutzer durch Schulname, Speicherort, Zugang und Karte.
Nutzt rich für schöne Konsolenausgabe.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import (
    AuthConfig,
    MapConfig,
    NavigatorConfig,
    StorageConfig,
    hash_password,
)
from config.defaults import default_config

console = Console()


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _info(text: str) -> None:
    console.print(f"[dim]{text}[/dim]")


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def _warn(text: str) -> None:
    console.print(f"[yellow]⚠[/yellow]  {text}")


def _show_config_table(config: NavigatorConfig) -> None:
    """Zeigt die wichtigsten Einstellungen als rich-Tabelle an."""
    table = Table(title="Konfiguration", box=box.ROUNDED)
    table.add_column("Bereich", style="bold")
    table.add_column("Wert")
    table.add_row("Schule", config.school_name)
    table.add_row("Speicher", config.storage.directory)
    table.add_row("Admins", ", ".join(config.auth.admin_emails) or "—")
    table.add_row(
        "Identity-Provider",
        "konfiguriert" if config.auth.identity_configured else "nicht konfiguriert",
    )
    table.add_row("Start-Etage", config.map.default_floor_id)
    table.add_row("Minikarte", f"{config.map.grid_width}×{config.map.grid_height}")
    console.print(table)


def _wizard_storage(current: StorageConfig) -> StorageConfig:
    _header("Schritt 2: Lokaler Speicher")
    _info("Datensatz und Sitzung werden als JSON-Dateien in diesem Verzeichnis abgelegt.")
    directory = Prompt.ask("Verzeichnis", default=current.directory)
    return current.model_copy(update={"directory": directory})


def _wizard_auth(current: AuthConfig) -> AuthConfig:
    _header("Schritt 3: Zugang")
    _warn("Kein echter Zugriffsschutz – nur für Demo- und Schulnetz-Betrieb.")
    password_hash = current.admin_password_sha256
    if Confirm.ask("Admin-Passwort ändern?", default=True):
        while True:
            pw = Prompt.ask("Neues Admin-Passwort", password=True)
            if not pw:
                _warn("Leeres Passwort nicht erlaubt.")
                continue
            if Prompt.ask("Wiederholen", password=True) != pw:
                _warn("Passwörter stimmen nicht überein.")
                continue
            password_hash = hash_password(pw)
            break

    raw_emails = Prompt.ask(
        "Admin-E-Mails (kommagetrennt)",
        default=", ".join(current.admin_emails),
    )
    emails = [e.strip() for e in raw_emails.split(",") if e.strip()]
    client_id = Prompt.ask(
        "Client-ID des Identity-Providers (leer = keiner)",
        default=current.identity_client_id or "",
    )
    return AuthConfig(
        admin_password_sha256=password_hash,
        admin_emails=emails,
        identity_client_id=client_id or None,
    )


def _wizard_map(current: MapConfig) -> MapConfig:
    _header("Schritt 4: Karte")
    default_floor = Prompt.ask("Start-Etage (ID)", default=current.default_floor_id)
    width = IntPrompt.ask("Breite der Minikarte (Zeichen)", default=current.grid_width)
    height = IntPrompt.ask("Höhe der Minikarte (Zeilen)", default=current.grid_height)
    return MapConfig.model_validate({
        **current.model_dump(),
        "default_floor_id": default_floor,
        "grid_width": width,
        "grid_height": height,
    })


def run_wizard(base: Optional[NavigatorConfig] = None) -> Optional[NavigatorConfig]:
    """Startet den Wizard. Gibt None zurück wenn der Nutzer abbricht."""
    config = base or default_config()

    _header("Schritt 1: Schule")
    school_name = Prompt.ask("Name der Schule", default=config.school_name)

    storage = _wizard_storage(config.storage)
    auth = _wizard_auth(config.auth)
    map_cfg = _wizard_map(config.map)

    try:
        result = NavigatorConfig(
            school_name=school_name,
            storage=storage,
            auth=auth,
            map=map_cfg,
        )
    except ValueError as e:
        _warn(f"Ungültige Eingabe: {e}")
        return None

    _header("Zusammenfassung")
    _show_config_table(result)
    if not Confirm.ask("Konfiguration speichern?", default=True):
        _warn("Abgebrochen.")
        return None
    _success("Konfiguration vollständig.")
    return result
