"""
Unit tests for Game class.

Tests game construction, operate() bookkeeping, win/lose conditions,
finished-game rejection and JSON save/restore.
"""
import io
import json

import pytest
import numpy as np
from minesweeper import (
    Cell,
    CellState,
    ConfigError,
    Coordinate,
    CoordinateError,
    DecodeError,
    ErrorKind,
    Field,
    FieldConfig,
    Game,
    GameConfig,
    GameFinishedError,
    GameState,
    InvalidInputError,
    OpType,
    TextUI,
    TransitionError,
)


def single_cell_game(has_mine: bool) -> Game:
    return Game.from_field(Field(1, 1, [[Cell(has_mine=has_mine)]]))


SNAPSHOT = (
    '{"state":"InProgress","quota":1,"opened":0,"field":{"width":1,"height":1,'
    '"cells":[[{"has_mine":false,"state":"Closed","surrounding_count":0}]]}}'
)


# ============================================================================
# Game Configuration Tests
# ============================================================================

class TestGameConfig:
    """Test game configuration loading."""

    def test_default_config(self) -> None:
        config = GameConfig()
        assert config.field == FieldConfig(9, 9, 10)

    def test_from_dict(self) -> None:
        config = GameConfig.from_dict(
            {"field": {"width": 5, "height": 4, "mine_count": 3}}
        )
        assert config.field == FieldConfig(5, 4, 3)

    def test_from_dict_defaults(self) -> None:
        assert GameConfig.from_dict({}) == GameConfig()

    @pytest.mark.parametrize("data", [
        {"board": {}},
        {"field": []},
        {"field": {"width": 0}},
        [],
    ])
    def test_from_dict_invalid(self, data) -> None:
        with pytest.raises(ConfigError):
            GameConfig.from_dict(data)

    def test_from_file(self, tmp_path) -> None:
        path = tmp_path / "game.json"
        path.write_text(json.dumps({"field": {"width": 4, "height": 4, "mine_count": 2}}))
        assert GameConfig.from_file(path).field == FieldConfig(4, 4, 2)

    def test_from_file_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "game.json"
        path.write_text("{field:")
        with pytest.raises(ConfigError, match="invalid config file"):
            GameConfig.from_file(path)


# ============================================================================
# Game Initialization Tests
# ============================================================================

class TestGameInitialization:
    """Test game creation and initial state."""

    def test_new_game_state(self, default_game: Game) -> None:
        assert default_game.state == GameState.IN_PROGRESS
        assert default_game.is_playing is True
        assert default_game.quota == 71
        assert default_game.opened == 0
        assert default_game.remaining == 71

    def test_new_game_field(self, default_game: Game) -> None:
        assert default_game.field.width == 9
        assert default_game.field.height == 9
        assert default_game.field.mine_count == 10
        assert default_game.field.count(CellState.CLOSED) == 81

    def test_default_ui(self, default_game: Game) -> None:
        assert isinstance(default_game.ui, TextUI)

    def test_custom_ui(self, dummy_ui) -> None:
        ui = dummy_ui()
        game = Game(GameConfig(FieldConfig(3, 3, 1)), ui=ui)
        assert game.ui is ui

    def test_quota_from_config(self, small_config: GameConfig) -> None:
        assert Game(small_config).quota == 8

    def test_invalid_config_propagates(self) -> None:
        config = GameConfig(FieldConfig(3, 3, 1))
        config.field.mine_count = 9
        with pytest.raises(ConfigError, match="failed to initialize field") as excinfo:
            Game(config)
        assert excinfo.value.kind == ErrorKind.INVALID_CONFIG

    def test_seeded_games_match(self) -> None:
        first = Game(rng=np.random.default_rng(11))
        second = Game(rng=np.random.default_rng(11))
        assert first.field == second.field


# ============================================================================
# Operate Tests
# ============================================================================

class TestOperate:
    """Test applying player input."""

    def test_single_safe_cell_clears(self) -> None:
        game = single_cell_game(has_mine=False)
        assert game.quota == 1

        assert game.operate("1 a") == GameState.CLEARED
        assert game.field.cell_at(Coordinate(0, 0)).is_opened
        assert game.opened == 1

    def test_single_mined_cell_loses(self) -> None:
        game = single_cell_game(has_mine=True)

        assert game.operate("1 a") == GameState.LOST
        assert game.field.cell_at(Coordinate(0, 0)).is_exploded
        assert game.opened == 0

    def test_open_mine_loses(self, corner_mine_game: Game) -> None:
        assert corner_mine_game.operate("4 d") == GameState.LOST
        assert corner_mine_game.is_lost is True
        assert corner_mine_game.field.count(CellState.EXPLODED) == 1
        assert corner_mine_game.field.count(CellState.OPENED) == 0

    def test_cascade_counts_toward_quota(self, corner_mine_game: Game) -> None:
        """One open that reveals every safe cell clears the game."""
        assert corner_mine_game.operate("1 a") == GameState.CLEARED
        assert corner_mine_game.opened == corner_mine_game.quota == 15

    def test_cleared_exactly_at_quota(self, walled_field: Field) -> None:
        game = Game.from_field(walled_field)
        assert game.quota == 12

        assert game.apply(OpType.OPEN, Coordinate(0, 0)) == GameState.IN_PROGRESS
        assert game.opened == 6
        assert game.apply(OpType.OPEN, Coordinate(3, 1)) == GameState.IN_PROGRESS
        assert game.opened == 7
        assert game.apply(OpType.OPEN, Coordinate(4, 1)) == GameState.CLEARED
        assert game.opened == 12

    def test_opened_never_exceeds_quota(self, random_field: Field) -> None:
        """Opening every safe cell one by one ends exactly at the quota."""
        game = Game.from_field(random_field)
        for coord in random_field.coordinates():
            cell = random_field.cell_at(coord)
            if cell.has_mine or not cell.is_closed:
                continue
            assert game.state == GameState.IN_PROGRESS
            assert game.opened < game.quota
            game.apply(OpType.OPEN, coord)
        assert game.state == GameState.CLEARED
        assert game.opened == game.quota

    def test_flag_and_unflag_keep_state(self, corner_mine_game: Game) -> None:
        assert corner_mine_game.operate("4 d f") == GameState.IN_PROGRESS
        assert corner_mine_game.field.cell_at(Coordinate(3, 3)).is_flagged
        assert corner_mine_game.operate(b"4 d unflag") == GameState.IN_PROGRESS
        assert corner_mine_game.field.cell_at(Coordinate(3, 3)).is_closed
        assert corner_mine_game.opened == 0

    def test_flag_blocks_cascade_until_unflagged(self, corner_mine_game: Game) -> None:
        corner_mine_game.operate("2 b f")
        assert corner_mine_game.operate("1 a") == GameState.IN_PROGRESS
        assert corner_mine_game.opened == 14
        corner_mine_game.operate("2 b u")
        assert corner_mine_game.operate("2 b") == GameState.CLEARED

    def test_invalid_input_leaves_game_unchanged(self, corner_mine_game: Game) -> None:
        before = corner_mine_game.to_dict()
        with pytest.raises(InvalidInputError) as excinfo:
            corner_mine_game.operate("open everything")
        assert excinfo.value.kind == ErrorKind.INVALID_INPUT
        assert corner_mine_game.to_dict() == before

    def test_ui_value_error_becomes_invalid_input(self, dummy_ui) -> None:
        def parse(raw):
            raise ValueError("no such cell")

        game = Game(GameConfig(FieldConfig(3, 3, 1)), ui=dummy_ui(parse=parse))
        with pytest.raises(InvalidInputError, match="no such cell"):
            game.operate("zz")
        assert game.state == GameState.IN_PROGRESS

    def test_field_errors_propagate(self, dummy_ui, walled_field: Field) -> None:
        ui = dummy_ui(parse=lambda raw: (OpType.OPEN, Coordinate(7, 0)))
        game = Game.from_field(walled_field, ui=ui)
        with pytest.raises(CoordinateError):
            game.operate("anything")
        assert game.state == GameState.IN_PROGRESS

    def test_illegal_transition_propagates(self, corner_mine_game: Game) -> None:
        corner_mine_game.operate("4 c")
        with pytest.raises(TransitionError) as excinfo:
            corner_mine_game.operate("4 c")
        assert excinfo.value.kind == ErrorKind.ALREADY_OPENED
        assert corner_mine_game.opened == 1
        assert corner_mine_game.state == GameState.IN_PROGRESS

    @pytest.mark.parametrize("finishing_input", ["4 d", "1 a"])
    def test_finished_game_rejects_operations(
        self, dummy_ui, corner_mine_field: Field, finishing_input: str
    ) -> None:
        """A finished game fails before the UI is consulted."""
        game = Game.from_field(corner_mine_field)
        game.operate(finishing_input)
        assert game.state.is_finished

        ui = dummy_ui(parse=lambda raw: (OpType.FLAG, Coordinate(0, 0)))
        game.ui = ui
        with pytest.raises(GameFinishedError) as excinfo:
            game.operate("1 a f")
        assert excinfo.value.kind == ErrorKind.GAME_ALREADY_FINISHED
        assert ui.parsed == []

    def test_finished_game_rejects_apply(self) -> None:
        game = single_cell_game(has_mine=True)
        game.apply(OpType.OPEN, Coordinate(0, 0))
        with pytest.raises(GameFinishedError, match="Lost"):
            game.apply(OpType.FLAG, Coordinate(0, 0))

    def test_unknown_operation_is_a_bug(self) -> None:
        game = single_cell_game(has_mine=False)
        with pytest.raises(RuntimeError, match="invalid operation type"):
            game.apply("bogus", Coordinate(0, 0))
        assert game.state == GameState.IN_PROGRESS
        assert game.field.cell_at(Coordinate(0, 0)).is_closed

    @pytest.mark.parametrize("new_state", [CellState.CLOSED, CellState.FLAGGED])
    def test_unexpected_open_result_is_a_bug(self, new_state: CellState) -> None:
        """Opening can only yield OPENED or EXPLODED."""
        game = single_cell_game(has_mine=False)
        with pytest.raises(RuntimeError, match="invalid operation result"):
            game._handle_open_result(new_state, 1)
        assert game.state == GameState.IN_PROGRESS
        assert game.opened == 0


# ============================================================================
# Render Tests
# ============================================================================

class TestRender:
    """Test rendering through the UI."""

    def test_render_delegates_to_ui(self, dummy_ui) -> None:
        seen = []

        def render(field):
            seen.append(field)
            return "rendered"

        game = Game(GameConfig(FieldConfig(3, 3, 1)), ui=dummy_ui(render=render))
        assert game.render() == "rendered"
        assert seen == [game.field]

    def test_default_render(self) -> None:
        game = single_cell_game(has_mine=False)
        game.operate("1 a")
        assert game.render() == "  1\na|-"


# ============================================================================
# Save / Restore Tests
# ============================================================================

class TestSaveRestore:
    """Test JSON snapshots."""

    def test_save_writes_four_fields(self, corner_mine_game: Game) -> None:
        corner_mine_game.operate("4 d f")
        stream = io.BytesIO()
        written = corner_mine_game.save(stream)

        data = stream.getvalue()
        assert written == len(data)
        doc = json.loads(data)
        assert set(doc) == {"field", "state", "quota", "opened"}
        assert doc["state"] == "InProgress"
        assert doc["quota"] == 15
        assert doc["opened"] == 0
        assert doc["field"]["cells"][3][3] == {
            "state": "Flagged", "has_mine": True, "surrounding_count": 0,
        }

    @pytest.mark.parametrize("moves", [
        [],
        ["1 a"],
        ["4 d"],
        ["2 b f", "1 a"],
    ])
    def test_round_trip(self, corner_mine_field: Field, moves) -> None:
        game = Game.from_field(corner_mine_field)
        for move in moves:
            game.operate(move)

        stream = io.BytesIO()
        game.save(stream)
        stream.seek(0)
        restored = Game.restore(stream)

        assert restored.state == game.state
        assert restored.quota == game.quota
        assert restored.opened == game.opened
        assert restored.field == game.field
        assert restored.to_dict() == game.to_dict()

    def test_restored_game_keeps_playing(self, walled_field: Field) -> None:
        game = Game.from_field(walled_field)
        game.operate("1 a")
        restored = Game.loads(game.dumps())

        assert restored.operate("5 a") == GameState.CLEARED
        assert restored.opened == 12

    def test_restore_example_snapshot(self) -> None:
        game = Game.restore(io.BytesIO(SNAPSHOT.encode()))
        assert game.state == GameState.IN_PROGRESS
        assert game.quota == 1
        assert game.opened == 0
        assert game.operate("1 a") == GameState.CLEARED

    def test_restore_uses_given_ui(self, dummy_ui) -> None:
        ui = dummy_ui()
        game = Game.loads(SNAPSHOT, ui=ui)
        assert game.ui is ui

    def test_restore_trusts_snapshot(self) -> None:
        """Counters are taken as persisted, not recomputed from cells."""
        doc = json.loads(SNAPSHOT)
        doc["state"] = "Lost"
        doc["opened"] = 5
        game = Game.loads(json.dumps(doc))
        assert game.state == GameState.LOST
        assert game.opened == 5
        assert game.field.cell_at(Coordinate(0, 0)).is_closed
        with pytest.raises(GameFinishedError):
            game.operate("1 a")

    @pytest.mark.parametrize("missing", ["state", "quota", "opened", "field"])
    def test_missing_top_level_field(self, missing: str) -> None:
        doc = json.loads(SNAPSHOT)
        del doc[missing]
        with pytest.raises(DecodeError, match=f'"{missing}" field is not given') as excinfo:
            Game.loads(json.dumps(doc))
        assert excinfo.value.kind == ErrorKind.MISSING_FIELD

    def test_unknown_game_state(self) -> None:
        doc = json.loads(SNAPSHOT)
        doc["state"] = "Won"
        with pytest.raises(DecodeError) as excinfo:
            Game.loads(json.dumps(doc))
        assert excinfo.value.kind == ErrorKind.UNKNOWN_STATE

    def test_state_is_not_numeric(self) -> None:
        doc = json.loads(SNAPSHOT)
        doc["state"] = 1
        with pytest.raises(DecodeError):
            Game.loads(json.dumps(doc))

    def test_field_decode_failure(self) -> None:
        doc = json.loads(SNAPSHOT)
        del doc["field"]["cells"][0][0]["has_mine"]
        with pytest.raises(DecodeError, match="failed to construct field") as excinfo:
            Game.loads(json.dumps(doc))
        assert excinfo.value.kind == ErrorKind.MISSING_FIELD

    @pytest.mark.parametrize("data", [
        b"",
        b"not json",
        b"[]",
        b'{"state":"InProgress","quota":-1,"opened":0,"field":{}}',
        b'{"state":"InProgress","quota":1,"opened":"0","field":{}}',
    ])
    def test_malformed_snapshot(self, data: bytes) -> None:
        with pytest.raises(DecodeError) as excinfo:
            Game.restore(io.BytesIO(data))
        assert excinfo.value.kind == ErrorKind.MALFORMED_DOCUMENT


# ============================================================================
# Game State Tests
# ============================================================================

class TestGameState:
    """Test the game state enumeration."""

    @pytest.mark.parametrize("state, name", [
        (GameState.IN_PROGRESS, "InProgress"),
        (GameState.CLEARED, "Cleared"),
        (GameState.LOST, "Lost"),
    ])
    def test_persisted_names(self, state: GameState, name: str) -> None:
        assert str(state) == name
        assert GameState.from_name(name) == state

    def test_finished_states(self) -> None:
        assert not GameState.IN_PROGRESS.is_finished
        assert GameState.CLEARED.is_finished
        assert GameState.LOST.is_finished
