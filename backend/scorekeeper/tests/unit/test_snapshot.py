import json

import pytest

from scorekeeper.logic import lifecycle
from scorekeeper.logic.enums import LifecyclePhase, TeamSlot
from scorekeeper.logic.state import ScorekeeperState
from scorekeeper.session.snapshot import SNAPSHOT_VERSION, dump_snapshot, load_snapshot
from scorekeeper.tests.conftest import create_in_progress_state, create_scorekeeper_state, make_round

ROUND = make_round("d", 150, meld={"d": 50}, tricks={"a": 40, "b": 40, "c": 60, "d": 100})


def states():
    in_progress = lifecycle.add_round(create_in_progress_state(), ROUND).state
    return [
        ScorekeeperState(),
        create_scorekeeper_state(),
        in_progress,
        lifecycle.forfeit(in_progress, TeamSlot.TEAM1).state,
    ]


class TestSnapshotRoundTrip:
    @pytest.mark.parametrize("state", states())
    def test_load_restores_equal_state(self, state):
        assert load_snapshot(dump_snapshot(state)) == state

    @pytest.mark.parametrize("state", states())
    def test_dump_of_loaded_snapshot_is_identical(self, state):
        content = dump_snapshot(state)

        assert dump_snapshot(load_snapshot(content)) == content

    def test_document_layout(self):
        data = json.loads(dump_snapshot(create_in_progress_state()))

        assert data["version"] == SNAPSHOT_VERSION
        assert [p["player_id"] for p in data["players"]] == ["a", "b", "c", "d"]
        assert data["active_game"]["teams"]["team1"]["name"] == "Anna & Ben"
        assert data["phase"] == LifecyclePhase.IN_PROGRESS.value
        assert data["winner"] is None


class TestLoadSnapshotErrors:
    def test_unknown_version_raises(self):
        data = json.loads(dump_snapshot(ScorekeeperState()))
        data["version"] = 99

        with pytest.raises(ValueError, match="Unsupported snapshot version 99"):
            load_snapshot(json.dumps(data))

    def test_malformed_json_raises(self):
        with pytest.raises(ValueError):
            load_snapshot("{not json")

    def test_inconsistent_phase_raises(self):
        data = json.loads(dump_snapshot(ScorekeeperState()))
        data["phase"] = LifecyclePhase.IN_PROGRESS.value

        with pytest.raises(ValueError, match="does not match game presence"):
            load_snapshot(json.dumps(data))

    def test_score_out_of_line_with_history_raises(self):
        state = lifecycle.add_round(create_in_progress_state(), ROUND).state
        data = json.loads(dump_snapshot(state))
        data["active_game"]["teams"]["team1"]["score"] += 100

        with pytest.raises(ValueError, match="does not match round history total"):
            load_snapshot(json.dumps(data))
