"""Schul-Navigator — Haupt-CLI.

Verwendung:
  python main.py setup                        Ersteinrichtung (Wizard)
  python main.py config show                  Konfiguration anzeigen
  python main.py floors list|add|set-map      Etagen verwalten
  python main.py rooms list|place|rename|delete
  python main.py show [ETAGE]                 Minikarte einer Etage
  python main.py today [--day Mon] [-q Mathe] Heutige Stunden
  python main.py center <RAUM>                Karte auf Raum zentrieren
  python main.py import rooms|schedule <datei.csv>
  python main.py import excel <datei.xlsx>
  python main.py import json <datei.json>     Datensatz komplett ersetzen
  python main.py export json|excel            Datensatz exportieren
  python main.py template                     Excel-Import-Vorlage erzeugen
  python main.py validate                     Datensatz prüfen
  python main.py reset-demo                   Demo-Daten laden (Admin)
  python main.py login | logout               Admin per Passwort
  python main.py signin <claims.json>         Anmeldung per Identity-Claims
  python main.py signout | whoami
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich import box

from data.json_import import JsonImportError
from data.tabular_import import TabularImportError
from navigator.errors import NavigatorError

console = Console()

DEFAULT_EXPORT_DIR = Path("output")


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load_config(ctx: click.Context):
    from config.manager import ConfigManager
    mgr = ConfigManager(ctx.obj.get("config_path"))
    config = mgr.load()
    storage_dir = ctx.obj.get("storage_dir")
    if storage_dir:
        config = config.model_copy(update={
            "storage": config.storage.model_copy(update={"directory": str(storage_dir)}),
        })
    return mgr, config


def _state(ctx: click.Context):
    """AppState für diesen Aufruf (einmal pro Prozess aufgebaut)."""
    if "state" not in ctx.obj:
        from navigator.app_state import AppState
        _, config = _load_config(ctx)
        ctx.obj["state"] = AppState(config)
    return ctx.obj["state"]


def _report_save_errors(state) -> None:
    for err in state.save_errors:
        console.print(
            f"[yellow]⚠ Speichern fehlgeschlagen ({err.key}):[/yellow] {err.message}\n"
            "[dim]Die Änderung gilt nur für diesen Aufruf.[/dim]"
        )


# ─── HAUPT-GRUPPE ─────────────────────────────────────────────────────────────

class NavigatorGroup(click.Group):
    """Click-Gruppe, die Bedienfehler rot meldet statt einen Traceback zu zeigen."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except (NavigatorError, TabularImportError, JsonImportError, ValueError) as e:
            console.print(f"[red bold]Fehler:[/red bold] {escape(str(e))}")
            sys.exit(1)


@click.group(cls=NavigatorGroup)
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Pfad zur YAML-Konfiguration (Default: config/navigator_config.yaml).")
@click.option("--storage", "storage_dir", type=click.Path(path_type=Path), default=None,
              help="Speicherverzeichnis (überschreibt storage.directory).")
@click.option("-v", "--verbose", count=True, help="-v: Info, -vv: Debug.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], storage_dir: Optional[Path], verbose: int):
    """Schul-Navigator: Räume auf Etagenplänen finden.

    Starten Sie mit: python main.py setup
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["storage_dir"] = storage_dir


# ─── SETUP ────────────────────────────────────────────────────────────────────

@cli.command("setup")
@click.pass_context
def cmd_setup(ctx: click.Context):
    """Ersteinrichtung: Konfiguration mit dem Setup-Wizard anlegen."""
    from config.wizard import run_wizard

    mgr, config = _load_config(ctx)
    if not mgr.first_run_check():
        console.print("[yellow]Eine Konfiguration existiert bereits.[/yellow]")
        if not click.confirm("Trotzdem neu einrichten?", default=False):
            return

    new_config = run_wizard(config)
    if new_config is not None:
        mgr.save(new_config)
        console.print("[bold green]Einrichtung abgeschlossen![/bold green]")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@cli.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config(ctx)
    source = "Defaults" if mgr.first_run_check() else str(mgr.path)
    console.print(Panel(
        f"[bold]{config.school_name}[/bold]  |  Quelle: {source}",
        title="Konfiguration",
        border_style="cyan",
    ))

    table = Table(box=box.ROUNDED)
    table.add_column("Einstellung", style="bold")
    table.add_column("Wert")
    st = config.storage
    table.add_row("Speicher", st.directory)
    table.add_row("Schlüssel", f"{st.dataset_key} / {st.role_key} / {st.user_key}")
    table.add_row("Admins", ", ".join(config.auth.admin_emails) or "—")
    table.add_row(
        "Identity-Provider",
        config.auth.identity_client_id or "[dim]nicht konfiguriert[/dim]",
    )
    mp = config.map
    table.add_row("Start-Etage", mp.default_floor_id)
    table.add_row("Zoom", f"{mp.zoom_min}–{mp.zoom_max} (Schritt ×{mp.zoom_step})")
    table.add_row("Minikarte", f"{mp.grid_width}×{mp.grid_height} Zeichen")
    console.print(table)


# ─── ETAGEN ───────────────────────────────────────────────────────────────────

@cli.group("floors")
def cmd_floors():
    """Etagen auflisten und bearbeiten."""


@cmd_floors.command("list")
@click.pass_context
def floors_list(ctx: click.Context):
    """Listet alle Etagen mit Anzahl der Räume."""
    dataset = _state(ctx).dataset
    if not dataset.floors:
        console.print("[dim]Keine Etagen vorhanden.[/dim]")
        return
    table = Table(title="Etagen", box=box.ROUNDED)
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Räume", justify="right")
    table.add_column("Grundriss")
    for floor in dataset.floors:
        table.add_row(
            floor.id, floor.name,
            str(len(dataset.rooms_on_floor(floor.id))),
            floor.map_image_ref or "[dim]—[/dim]",
        )
    console.print(table)


@cmd_floors.command("add")
@click.argument("name")
@click.pass_context
def floors_add(ctx: click.Context, name: str):
    """Legt eine neue Etage an (ID wird erzeugt)."""
    state = _state(ctx)
    floor = state.add_floor(name)
    _report_save_errors(state)
    console.print(f"[green]✓[/green] Etage angelegt: {floor.name} (ID {floor.id})")


@cmd_floors.command("set-map")
@click.argument("floor_id")
@click.argument("ref", required=False)
@click.pass_context
def floors_set_map(ctx: click.Context, floor_id: str, ref: Optional[str]):
    """Setzt den Grundriss (Pfad/URL) einer Etage. Ohne REF: entfernen."""
    state = _state(ctx)
    floor = state.set_floor_map(floor_id, ref or None)
    _report_save_errors(state)
    if floor.map_image_ref:
        console.print(f"[green]✓[/green] Grundriss für {floor.name}: {floor.map_image_ref}")
    else:
        console.print(f"[green]✓[/green] Grundriss für {floor.name} entfernt")


# ─── RÄUME ────────────────────────────────────────────────────────────────────

@cli.group("rooms")
def cmd_rooms():
    """Räume auflisten, platzieren, umbenennen, löschen."""


@cmd_rooms.command("list")
@click.option("--floor", "floor_id", default=None, help="Nur Räume dieser Etage.")
@click.pass_context
def rooms_list(ctx: click.Context, floor_id: Optional[str]):
    """Listet Räume mit Position."""
    from export.tui_renderer import render_room_rows

    dataset = _state(ctx).dataset
    rows = render_room_rows(dataset, floor_id)
    if not rows:
        console.print("[dim]Keine Räume vorhanden.[/dim]")
        return
    table = Table(title="Räume", box=box.ROUNDED)
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Etage")
    table.add_column("X %", justify="right")
    table.add_column("Y %", justify="right")
    for row in rows:
        table.add_row(*row)
    console.print(table)


@cmd_rooms.command("place")
@click.argument("room_id")
@click.argument("x", type=float)
@click.argument("y", type=float)
@click.option("--floor", "floor_id", default=None, help="Etage (Default: Start-Etage).")
@click.option("--name", default=None, help="Name für einen neuen Raum.")
@click.pass_context
def rooms_place(ctx: click.Context, room_id: str, x: float, y: float,
                floor_id: Optional[str], name: Optional[str]):
    """Setzt einen Raum auf (X %, Y %) einer Etage."""
    state = _state(ctx)
    target = state.resolve_floor_id(floor_id)
    if target is None:
        raise NavigatorError("Keine Etage vorhanden – zuerst: python main.py floors add <name>")
    room = state.place_room(room_id, target, x, y, name=name)
    _report_save_errors(state)
    console.print(
        f"[green]✓[/green] {room.id} ({room.name}) auf Etage {room.floor_id} "
        f"bei {room.x:g} % / {room.y:g} %"
    )


@cmd_rooms.command("rename")
@click.argument("room_id")
@click.argument("name")
@click.pass_context
def rooms_rename(ctx: click.Context, room_id: str, name: str):
    """Gibt einem Raum einen neuen Namen."""
    state = _state(ctx)
    room = state.rename_room(room_id, name)
    _report_save_errors(state)
    console.print(f"[green]✓[/green] {room.id} heißt jetzt: {room.name}")


@cmd_rooms.command("delete")
@click.argument("room_id")
@click.pass_context
def rooms_delete(ctx: click.Context, room_id: str):
    """Löscht einen Raum (nur Admin)."""
    state = _state(ctx)
    room = state.delete_room(room_id)
    _report_save_errors(state)
    console.print(f"[green]✓[/green] Raum gelöscht: {room.id} ({room.name})")


# ─── KARTE ────────────────────────────────────────────────────────────────────

@cli.command("show")
@click.argument("floor_id", required=False)
@click.option("--highlight", default=None, help="Raum-ID, die mit '@' markiert wird.")
@click.pass_context
def cmd_show(ctx: click.Context, floor_id: Optional[str], highlight: Optional[str]):
    """Zeigt die Minikarte einer Etage im Terminal."""
    from export.tui_renderer import render_floor_grid

    state = _state(ctx)
    target = state.resolve_floor_id(floor_id)
    if target is None:
        console.print("[dim]Keine Etagen vorhanden.[/dim]")
        return
    floor = state.dataset.get_floor(target)
    mp = state.config.map
    lines, legend = render_floor_grid(
        state.dataset, target, mp.grid_width, mp.grid_height, highlight=highlight,
    )
    subtitle = floor.map_image_ref or "kein Grundriss"
    console.print(f"[bold]{floor.name}[/bold] ({floor.id}) [dim]– {subtitle}[/dim]")
    for line in lines:
        console.print(line, markup=False, highlight=False)

    if legend:
        table = Table(box=box.SIMPLE)
        table.add_column("", style="bold cyan")
        table.add_column("Raum")
        table.add_column("Name")
        for symbol, room_id, name in legend:
            table.add_row(symbol, room_id, name)
        console.print(table)


@cli.command("center")
@click.argument("room_id")
@click.option("--width", default=1024.0, type=float, help="Breite des Sichtfensters (px).")
@click.option("--height", default=768.0, type=float, help="Höhe des Sichtfensters (px).")
@click.option("--zoom", default=1.0, type=float, help="Zoomfaktor.")
@click.option("--zoom-in", "zoom_in_steps", default=0, type=click.IntRange(min=0),
              help="Zoom-Schritte hinein (Schrittweite aus der Config).")
@click.option("--zoom-out", "zoom_out_steps", default=0, type=click.IntRange(min=0),
              help="Zoom-Schritte heraus.")
@click.pass_context
def cmd_center(ctx: click.Context, room_id: str, width: float, height: float, zoom: float,
               zoom_in_steps: int, zoom_out_steps: int):
    """Berechnet die Scroll-Position, die einen Raum zentriert."""
    from navigator.coordinates import Size

    state = _state(ctx)
    mp = state.config.map
    if not mp.zoom_min <= zoom <= mp.zoom_max:
        raise NavigatorError(f"Zoom {zoom} außerhalb von {mp.zoom_min}–{mp.zoom_max}")
    zoom = state.step_zoom(zoom, zoom_in_steps - zoom_out_steps)
    offset = state.center_on_room(room_id, Size(width, height), zoom)
    room = state.dataset.get_room(room_id)
    floor = state.dataset.get_floor(room.floor_id)
    console.print(
        f"[bold]{room.id}[/bold] ({room.name}) – Etage "
        f"{floor.name if floor else room.floor_id} bei {room.x:g} % / {room.y:g} %"
    )
    console.print(f"Zoom ×{zoom:g}")
    console.print(f"Scroll-Position: links {offset.left:.0f} px, oben {offset.top:.0f} px")


# ─── STUNDENPLAN ──────────────────────────────────────────────────────────────

@cli.command("today")
@click.option("--day", default=None, help="Wochentag (Mon..Sun), Default: heute.")
@click.option("--query", "-q", default="", help="Suche in Fach, Lehrkraft, Raum.")
@click.pass_context
def cmd_today(ctx: click.Context, day: Optional[str], query: str):
    """Zeigt die Stunden des Tages, sortiert nach Beginn."""
    from export.tui_renderer import render_lesson_rows
    from navigator.schedule_filter import weekday_code

    state = _state(ctx)
    day = day or weekday_code()
    lessons = state.lessons_for(day, query)
    title = f"Stunden am {day}" + (f" – Suche: {query}" if query else "")
    if not lessons:
        console.print(f"[dim]{title}: keine Stunden.[/dim]")
        return
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Zeit")
    table.add_column("Fach", style="bold")
    table.add_column("Raum")
    table.add_column("Etage")
    table.add_column("Lehrkraft")
    for row in render_lesson_rows(lessons, state.dataset):
        table.add_row(*row)
    console.print(table)


# ─── IMPORT ───────────────────────────────────────────────────────────────────

@cli.group("import")
def cmd_import():
    """CSV, Excel oder JSON importieren."""


@cmd_import.command("rooms")
@click.argument("datei", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_rooms(ctx: click.Context, datei: Path):
    """Räume aus CSV (id,name,x,y,floor) zusammenführen."""
    from data.tabular_import import read_text_file

    state = _state(ctx)
    report = state.import_rooms_text(read_text_file(datei))
    report.print_rich()
    _report_save_errors(state)


@cmd_import.command("schedule")
@click.argument("datei", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_schedule(ctx: click.Context, datei: Path):
    """Stunden aus CSV (day,timeStart,timeEnd,subject,roomId,teacher) zusammenführen."""
    from data.tabular_import import read_text_file

    state = _state(ctx)
    report = state.import_schedule_text(read_text_file(datei))
    report.print_rich()
    _report_save_errors(state)


@cmd_import.command("excel")
@click.argument("datei", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_excel(ctx: click.Context, datei: Path):
    """Excel-Mappe: Blatt 'rooms' und 'schedule' (sonst 1. und 2. Blatt)."""
    state = _state(ctx)
    console.print(f"[bold]Importiere:[/bold] {datei}")
    report = state.import_workbook(datei)
    report.print_rich()
    _report_save_errors(state)


@cmd_import.command("json")
@click.argument("datei", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_json(ctx: click.Context, datei: Path):
    """Ersetzt den kompletten Datensatz durch eine JSON-Datei."""
    state = _state(ctx)
    report = state.import_json_file(datei)
    report.print_rich()
    _report_save_errors(state)


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@cli.group("export")
def cmd_export():
    """Datensatz als JSON oder Excel exportieren."""


@cmd_export.command("json")
@click.option("--output", "-o", default=str(DEFAULT_EXPORT_DIR), help="Datei oder Verzeichnis.")
@click.pass_context
def export_json(ctx: click.Context, output: str):
    """Exportiert den Datensatz als eingerücktes JSON."""
    out_path = _state(ctx).export_json_file(Path(output))
    console.print(f"[green]✓[/green] JSON gespeichert: {out_path}")


@cmd_export.command("excel")
@click.option("--output", "-o", default=str(DEFAULT_EXPORT_DIR), help="Datei oder Verzeichnis.")
@click.pass_context
def export_excel(ctx: click.Context, output: str):
    """Exportiert Räume und Stunden als Excel-Mappe (wieder importierbar)."""
    from export.excel_export import ExcelExporter

    out_path = ExcelExporter(_state(ctx).dataset).export(Path(output))
    console.print(f"[green]✓[/green] Excel gespeichert: {out_path}")


@cli.command("template")
@click.option("--output", "-o", default=str(DEFAULT_EXPORT_DIR), help="Datei oder Verzeichnis.")
def cmd_template(output: str):
    """Erzeugt eine Excel-Import-Vorlage mit Beispielzeilen."""
    from export.excel_export import generate_template

    out_path = generate_template(Path(output))
    console.print(f"[green]✓[/green] Vorlage gespeichert: {out_path}")
    console.print(
        "\nBlätter in der Vorlage:\n"
        "  [cyan]rooms[/cyan]     – id, name, x, y, floor\n"
        "  [cyan]schedule[/cyan]  – day, timeStart, timeEnd, subject, roomId, teacher"
    )


# ─── PRÜFEN / ZURÜCKSETZEN ────────────────────────────────────────────────────

@cli.command("validate")
@click.pass_context
def cmd_validate(ctx: click.Context):
    """Prüft den aktuellen Datensatz (Referenzen, Positionen, Uhrzeiten)."""
    from analysis.dataset_validator import validate_dataset

    dataset = _state(ctx).dataset
    console.print(f"\n{dataset.summary()}\n")
    report = validate_dataset(dataset)
    report.print_rich()
    sys.exit(0 if report.is_valid else 1)


@cli.command("reset-demo")
@click.option("--yes", is_flag=True, default=False, help="Ohne Rückfrage.")
@click.pass_context
def cmd_reset_demo(ctx: click.Context, yes: bool):
    """Ersetzt den Datensatz durch die Demo-Daten (nur Admin)."""
    state = _state(ctx)
    state.guard.require_admin("Datensatz zurücksetzen")
    if not yes and not click.confirm("Aktuellen Datensatz verwerfen?", default=False):
        return
    state.reset_to_demo()
    _report_save_errors(state)
    console.print("[green]✓[/green] Demo-Daten geladen")


# ─── SITZUNG ──────────────────────────────────────────────────────────────────

@cli.command("login")
@click.option("--password", prompt="Admin-Passwort", hide_input=True)
@click.pass_context
def cmd_login(ctx: click.Context, password: str):
    """Admin-Rolle per Passwort."""
    state = _state(ctx)
    if not state.guard.login_password(password):
        raise NavigatorError("Falsches Passwort")
    console.print(f"[green]✓[/green] Angemeldet ({state.guard.state.value})")


@cli.command("logout")
@click.pass_context
def cmd_logout(ctx: click.Context):
    """Admin-Rolle abgeben."""
    state = _state(ctx)
    state.guard.logout_local()
    console.print(f"[green]✓[/green] Abgemeldet ({state.guard.state.value})")


@cli.command("signin")
@click.argument("claims_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def cmd_signin(ctx: click.Context, claims_file: Path):
    """Anmeldung mit Claims des Identity-Providers (JSON-Datei).

    Die Claims müssen bereits geprüft sein – die Token-Signatur wird hier
    nicht kontrolliert.
    """
    from navigator.errors import CredentialError

    try:
        claims = json.loads(claims_file.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CredentialError(f"Anmeldedaten nicht lesbar: {e}") from e
    state = _state(ctx)
    identity = state.guard.sign_in(claims)
    console.print(
        f"[green]✓[/green] Angemeldet als {identity.display_name or identity.external_id} "
        f"<{identity.email or '—'}> ({state.guard.state.value})"
    )


@cli.command("signout")
@click.pass_context
def cmd_signout(ctx: click.Context):
    """Lokale Sitzung beenden (die Sitzung beim Identity-Provider bleibt)."""
    state = _state(ctx)
    state.guard.sign_out()
    console.print(f"[green]✓[/green] Abgemeldet ({state.guard.state.value})")


@cli.command("whoami")
@click.pass_context
def cmd_whoami(ctx: click.Context):
    """Zeigt Sitzung und Rolle."""
    session = _state(ctx).guard.session
    lines = [f"Zustand: [bold]{session.state.value}[/bold]", f"Rolle: {session.role.value}"]
    if session.identity is not None:
        ident = session.identity
        lines.append(f"Identität: {ident.display_name or '—'} <{ident.email or '—'}>")
        lines.append(f"[dim]ID: {ident.external_id}[/dim]")
    console.print(Panel("\n".join(lines), title="Sitzung", border_style="cyan"))


def main():
    """Einstiegspunkt. Startet den Wizard beim ersten Aufruf ohne Argumente."""
    from config.manager import ConfigManager

    if len(sys.argv) == 1 and ConfigManager().first_run_check():
        console.print(Panel(
            "[bold]Willkommen beim Schul-Navigator![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Der Setup-Wizard wird jetzt gestartet...",
            border_style="cyan",
        ))
        sys.argv.append("setup")

    cli()


if __name__ == "__main__":
    main()
