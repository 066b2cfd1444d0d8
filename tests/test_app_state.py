"""Tests für AppState: Änderungen, Importe, Rollenprüfung, Speicherfehler."""

import json
from datetime import date
from pathlib import Path

import pytest

from config.defaults import demo_dataset
from config.schema import NavigatorConfig, StorageConfig
from data.local_store import LocalStore
from navigator.app_state import AppState
from navigator.coordinates import Rect, Size
from navigator.errors import (
    DatasetImportError,
    FloorNotFoundError,
    NavigatorError,
    PermissionDeniedError,
    RoomNotFoundError,
    RoomNotPlacedError,
)


def _config(directory: Path) -> NavigatorConfig:
    return NavigatorConfig(storage=StorageConfig(directory=str(directory)))


@pytest.fixture
def state(tmp_path: Path) -> AppState:
    return AppState(_config(tmp_path / "store"))


def _login(state: AppState) -> None:
    assert state.guard.login_password("admin123")


# ─── START / SPEICHERN ────────────────────────────────────────────────────────

class TestStartup:
    def test_demo_when_empty(self, state: AppState):
        """Leerer Speicher → Demo-Daten, noch nichts geschrieben."""
        assert state.dataset == demo_dataset()
        assert state.store.get_raw("school_navigator_v1") is None

    def test_demo_when_corrupt(self, tmp_path: Path):
        store_dir = tmp_path / "store"
        store_dir.mkdir()
        (store_dir / "school_navigator_v1.json").write_text("kaputt", encoding="utf-8")
        assert AppState(_config(store_dir)).dataset == demo_dataset()

    def test_mutation_is_persisted(self, tmp_path: Path):
        config = _config(tmp_path / "store")
        AppState(config).rename_room("A101", "Robotik")
        assert AppState(config).dataset.get_room("A101").name == "Robotik"


class TestUpdate:
    def test_version_increments(self, state: AppState):
        state.update(lambda d: d, "nichts")
        state.update(lambda d: d, "nichts")
        assert state.version == 2

    def test_failing_transform_changes_nothing(self, state: AppState):
        """Wirft die Transformation, bleibt alles wie es war."""
        before = state.dataset

        def broken(d):
            d.rooms.clear()
            raise RuntimeError("kaputt")

        with pytest.raises(RuntimeError):
            state.update(broken, "kaputt")
        assert state.dataset == before
        assert len(state.dataset.rooms) == 3
        assert state.version == 0
        assert state.store.get_raw("school_navigator_v1") is None

    def test_save_failure_recorded(self, tmp_path: Path):
        """Speichern schlägt fehl → Änderung gilt im Speicher, Fehler wird gemeldet."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        state = AppState(_config(blocker))
        state.rename_room("A101", "Robotik")
        assert state.dataset.get_room("A101").name == "Robotik"
        assert len(state.save_errors) == 1
        assert state.save_errors[0].key == "school_navigator_v1"


# ─── RÄUME / ETAGEN ───────────────────────────────────────────────────────────

class TestRooms:
    def test_place_new_room(self, state: AppState):
        room = state.place_room("C301", "2", 150, -3, name="Chemie")
        assert (room.x, room.y) == (100, 0)
        assert room.name == "Chemie"
        assert state.dataset.rooms[-1].id == "C301"

    def test_place_existing_keeps_name(self, state: AppState):
        room = state.place_room("A101", "2", 10.123, 20, name="Ignoriert")
        assert room.name == "Informatik"
        assert room.floor_id == "2"
        assert room.x == 10.12
        assert [r.id for r in state.dataset.rooms].count("A101") == 1

    def test_place_unknown_floor(self, state: AppState):
        with pytest.raises(FloorNotFoundError):
            state.place_room("A101", "99", 10, 10)

    def test_place_at_pointer(self, state: AppState):
        room = state.place_room_at_pointer("A102", "1", 150, 100, Rect(100, 50, 200, 100))
        assert (room.x, room.y) == (25, 50)

    def test_rename_unknown(self, state: AppState):
        with pytest.raises(RoomNotFoundError):
            state.rename_room("Z999", "X")

    def test_delete_requires_admin(self, state: AppState):
        """Ohne Admin-Rolle: Fehler, Raumliste unverändert."""
        before = [r.id for r in state.dataset.rooms]
        with pytest.raises(PermissionDeniedError):
            state.delete_room("A101")
        assert [r.id for r in state.dataset.rooms] == before

    def test_delete_as_admin(self, state: AppState):
        _login(state)
        removed = state.delete_room("A101")
        assert removed.id == "A101"
        assert state.dataset.get_room("A101") is None
        # Stunde mit A101 bleibt (weiche Referenz)
        assert any(s.room_id == "A101" for s in state.dataset.schedule)

    def test_delete_unknown_as_admin(self, state: AppState):
        _login(state)
        with pytest.raises(RoomNotFoundError):
            state.delete_room("Z999")

    def test_delete_after_role_lost(self, state: AppState):
        """Rolle wird beim Aufruf geprüft, nicht beim Anmelden."""
        _login(state)
        state.guard.logout_local()
        with pytest.raises(PermissionDeniedError):
            state.delete_room("A101")

    def test_add_floor(self, state: AppState):
        floor = state.add_floor("  Dachgeschoss ")
        assert floor.name == "Dachgeschoss"
        assert len(floor.id) == 6
        assert state.dataset.get_floor(floor.id) == floor

    def test_add_floor_empty_name(self, state: AppState):
        with pytest.raises(NavigatorError):
            state.add_floor("  ")

    def test_set_floor_map(self, state: AppState):
        assert state.set_floor_map("1", "plans/eg.png").map_image_ref == "plans/eg.png"
        assert state.set_floor_map("1", None).map_image_ref is None

    def test_resolve_floor_id(self, state: AppState):
        assert state.resolve_floor_id() == "1"
        assert state.resolve_floor_id("2") == "2"
        with pytest.raises(FloorNotFoundError):
            state.resolve_floor_id("99")

    def test_resolve_unknown_floor_no_fallback(self, state: AppState):
        """Genannte, unbekannte Etage → Fehler statt Start-Etage."""
        with pytest.raises(FloorNotFoundError):
            state.place_room("Z9", "9", 10, 10)
        assert state.dataset.get_room("Z9") is None

    def test_resolve_default_floor_missing(self, tmp_path: Path):
        config = _config(tmp_path / "store")
        config.map.default_floor_id = "99"
        assert AppState(config).resolve_floor_id() == "1"

    def test_reset_to_demo_requires_admin(self, state: AppState):
        state.rename_room("A101", "X")
        with pytest.raises(PermissionDeniedError):
            state.reset_to_demo()
        _login(state)
        state.reset_to_demo()
        assert state.dataset == demo_dataset()


class TestCenter:
    def test_step_zoom_uses_config(self, tmp_path: Path):
        config = _config(tmp_path / "store")
        config.map.zoom_step = 2.0
        config.map.zoom_max = 3.0
        state = AppState(config)
        assert state.step_zoom(1.0, 1) == 2.0
        assert state.step_zoom(1.0, 3) == 3.0
        assert state.step_zoom(1.0, -5) == 0.5
        assert state.step_zoom(1.5, 0) == 1.5

    def test_center_on_room(self, state: AppState):
        # A101 bei (22 %, 36 %), Container 2000×1000 bei Zoom 2
        offset = state.center_on_room("A101", Size(1000, 500), zoom=2.0)
        assert offset.left == 0
        assert offset.top == pytest.approx(110)

    def test_center_without_zoom(self, state: AppState):
        offset = state.center_on_room("B201", Size(800, 600))
        assert offset.left == pytest.approx(144)
        assert offset.top == pytest.approx(12)

    def test_center_unknown(self, state: AppState):
        with pytest.raises(RoomNotFoundError):
            state.center_on_room("Z999", Size(800, 600))

    def test_center_unplaced(self, state: AppState):
        state.import_rooms_text("id,name,x,y,floor\nK1,Keller,,,1\n")
        with pytest.raises(RoomNotPlacedError):
            state.center_on_room("K1", Size(800, 600))


# ─── IMPORTE ──────────────────────────────────────────────────────────────────

class TestImports:
    def test_rooms_csv_merges(self, state: AppState):
        report = state.import_rooms_text("id;name;x;y;floor\nA101;Neu;1;2;1\nC1;Chemie;3;4;2\n")
        assert report.applied
        assert report.shadowed_rooms == ["A101"]
        assert [r.id for r in state.dataset.rooms] == ["A102", "B201", "A101", "C1"]
        assert state.dataset.get_room("A101").name == "Neu"
        assert report.diff.rooms_added == ["C1"]

    def test_same_import_twice(self, state: AppState):
        text = "id,name,x,y,floor\nA101,Neu,1,2,1\n"
        state.import_rooms_text(text)
        once = state.dataset
        state.import_rooms_text(text)
        assert state.dataset == once

    def test_schedule_csv(self, state: AppState):
        report = state.import_schedule_text(
            "day,timeStart,timeEnd,subject,roomId,teacher\n"
            "Mon,08:30,09:15,Robotik,A101,Neumann\n"
            "Tue,08:00,08:45,Sport,Halle,\n"
        )
        assert report.lessons_imported == 2
        assert len(state.dataset.schedule) == 3
        assert state.lessons_for("Mon")[0].subject == "Robotik"
        # Halle existiert nicht → Warnung, aber importiert
        assert any(v.check == "lesson_unknown_room" for v in report.validation.warnings)

    def test_stale_import_dropped(self, state: AppState):
        """Nur der zuletzt gestartete Import wird angewendet."""
        first = state.begin_import()
        second = state.begin_import()
        assert not state.finish_import(first, lambda d: d.model_copy(update={"rooms": []}))
        assert len(state.dataset.rooms) == 3
        assert state.finish_import(second, lambda d: d.model_copy(update={"schedule": []}))
        assert state.dataset.schedule == []

    def test_failed_import_keeps_pending(self, state: AppState):
        """Ein gescheiterter neuerer Import verdrängt den laufenden nicht."""
        pending = state.begin_import()
        with pytest.raises(DatasetImportError):
            state.import_json_text("nicht json")
        assert state.finish_import(pending, lambda d: d.model_copy(update={"schedule": []}))
        assert state.dataset.schedule == []

    def test_failed_import_is_not_applied(self, state: AppState):
        ticket = state.begin_import()
        state.abandon_import(ticket)
        assert not state.finish_import(ticket, lambda d: d.model_copy(update={"rooms": []}))
        assert len(state.dataset.rooms) == 3

    def test_json_replaces_all(self, state: AppState):
        doc = {
            "floors": [{"id": "9", "name": "Neubau"}],
            "rooms": [{"id": "N1", "name": "Aula", "x": 50, "y": 50, "floorId": "9"}],
            "schedule": [],
        }
        report = state.import_json_text(json.dumps(doc))
        assert report.applied
        assert [f.id for f in state.dataset.floors] == ["9"]
        assert report.diff.rooms_removed == ["A101", "A102", "B201"]

    @pytest.mark.parametrize("text", [
        "nicht json",
        "[]",
        '{"floors": [], "rooms": []}',
        '{"floors": [], "rooms": [{"id": "A", "name": "B", "x": 500, "y": 1, "floorId": "1"}], "schedule": []}',
        '{"floors": [], "rooms": [{"id": "A", "name": "B", "floorId": "1"}, {"id": "A", "name": "C", "floorId": "1"}], "schedule": []}',
    ])
    def test_invalid_json_rejected(self, state: AppState, text: str):
        """Ungültiges JSON → Fehler, Datensatz unverändert."""
        before = state.dataset
        with pytest.raises(DatasetImportError) as exc:
            state.import_json_text(text)
        assert exc.value.errors
        assert state.dataset == before

    def test_export_import_round_trip(self, state: AppState, tmp_path: Path):
        state.import_rooms_text("id,name,x,y\nK1,Keller,,\n")
        path = state.export_json_file(tmp_path)
        assert path.name == "school_navigator_export.json"
        other = AppState(_config(tmp_path / "other"))
        other.import_json_file(path)
        assert other.dataset == state.dataset

    def test_workbook_import(self, state: AppState, tmp_path: Path):
        from openpyxl import Workbook
        wb = Workbook()
        ws = wb.active
        ws.title = "Räume"
        ws.append(["room", "title", "x", "y", "floor"])
        ws.append(["A103", "Kunst", 70, 70, 1])
        path = tmp_path / "raeume.xlsx"
        wb.save(path)

        report = state.import_workbook(path)
        assert report.schedule_skipped
        assert state.dataset.get_room("A103").name == "Kunst"
        assert len(state.dataset.schedule) == 2


class TestToday:
    def test_lessons_for_today(self, state: AppState):
        monday = date(2024, 9, 2)
        assert [s.room_id for s in state.lessons_for_today(today=monday)] == ["A101", "A102"]
        assert [s.room_id for s in state.lessons_for_today("petrenko", monday)] == ["A102"]
        assert state.lessons_for_today(today=date(2024, 9, 3)) == []

    def test_room_for_lesson(self, state: AppState):
        lesson = state.dataset.schedule[0]
        assert state.room_for_lesson(lesson).id == "A101"
        _login(state)
        state.delete_room("A101")
        assert state.room_for_lesson(lesson) is None
