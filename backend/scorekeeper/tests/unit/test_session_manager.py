"""
Verifies the scorekeeping session: preview-then-commit, error events at the
boundary, preview invalidation and snapshot persistence after each change.
"""

import pytest

from scorekeeper.logic.enums import ErrorCode, LifecyclePhase, RoundOutcome, TeamSlot
from scorekeeper.logic.events import ErrorEvent, GameWonEvent, RoundCommittedEvent
from scorekeeper.logic.exceptions import InvalidInputError, UnsupportedSettingsError
from scorekeeper.logic.ledger import get_player
from scorekeeper.logic.settings import GameSettings
from scorekeeper.session.manager import ScorekeeperSession
from scorekeeper.session.snapshot import load_snapshot
from scorekeeper.tests.conftest import PLAYER_NAMES, TEAM1_IDS, TEAM2_IDS, make_round
from shared.storage import LocalSnapshotStorage

# team1 +170, team2 +130
FULL_ROUND = make_round("a", 150, meld={"a": 40, "c": 20}, tricks={"a": 70, "b": 60, "c": 60, "d": 50})


class MemoryStorage:
    def __init__(self, *, fail: bool = False):
        self.saved: dict[str, str] = {}
        self.saves = 0
        self.fail = fail

    def save_snapshot(self, name, content):
        if self.fail:
            raise OSError("disk full")
        self.saves += 1
        self.saved[name] = content

    def load_snapshot(self, name):
        return self.saved.get(name)

    def delete_snapshot(self, name):
        self.saved.pop(name, None)


def make_session(storage=None, settings=None, *, start=True, target_score=None):
    session = ScorekeeperSession(settings=settings, storage=storage)
    for player_id, name in PLAYER_NAMES.items():
        session.create_player(name, player_id)
    if start:
        session.start_game([TEAM1_IDS, TEAM2_IDS], target_score)
    return session


class TestConstruction:
    def test_starts_empty(self):
        session = ScorekeeperSession()

        assert session.state.phase == LifecyclePhase.NO_GAME
        assert session.state.ledger.players == ()
        assert session.pending is None

    def test_rejects_unsupported_settings(self):
        with pytest.raises(UnsupportedSettingsError, match="players_per_team"):
            ScorekeeperSession(settings=GameSettings(players_per_team=3))

    def test_default_target_from_settings(self):
        session = make_session(settings=GameSettings(default_target_score=1000))

        assert session.state.game.target_score == 1000

    def test_explicit_target_overrides_default(self):
        session = make_session(target_score=500)

        assert session.state.game.target_score == 500


class TestPreviewAndCommit:
    def test_preview_does_not_commit(self):
        session = make_session()

        preview = session.preview_round(FULL_ROUND)

        assert preview.result.team1_round_score == 170
        assert preview.result.outcome == RoundOutcome.BID_MADE
        assert preview.remaining_trick_points == 0
        assert session.pending is preview
        assert session.state.game.history == ()

    def test_commit_applies_previewed_round(self):
        session = make_session()
        session.preview_round(FULL_ROUND)

        events = session.commit_round()

        assert isinstance(events[0], RoundCommittedEvent)
        assert session.state.game.teams.team1.score == 170
        assert session.pending is None

    def test_commit_uses_the_previewed_round_after_caller_edits(self):
        session = make_session()
        meld = {"a": 40, "c": 20}
        tricks = {"a": 70, "b": 60, "c": 60, "d": 50}
        # model_copy skips validation, so the caller still holds these dicts
        round_input = session.new_round("a").model_copy(update={"meld_points": meld, "trick_points": tricks})
        session.preview_round(round_input)

        meld.clear()
        tricks.update({"a": 10, "b": 10, "c": 110, "d": 110})
        session.commit_round()

        entry = session.state.game.history[-1]
        assert entry.outcome == RoundOutcome.BID_MADE
        assert session.state.game.teams.team1.score == 170

    def test_new_round_starts_at_default_bid(self):
        session = make_session(settings=GameSettings(default_bid_value=200))

        round_input = session.new_round("c")

        assert round_input.bidder_id == "c"
        assert round_input.bid_value == 200
        assert round_input.meld_points == {}
        assert round_input.abandoned is False

    def test_commit_without_preview_returns_error_event(self):
        session = make_session()

        events = session.commit_round()

        assert len(events) == 1
        assert events[0].code == ErrorCode.NO_PENDING_PREVIEW
        assert session.state.game.history == ()

    def test_cancel_preview(self):
        session = make_session()
        session.preview_round(FULL_ROUND)

        session.cancel_preview()

        assert session.pending is None
        assert session.commit_round()[0].code == ErrorCode.NO_PENDING_PREVIEW

    def test_preview_rejects_incomplete_trick_pool(self):
        session = make_session()

        with pytest.raises(InvalidInputError, match="remaining"):
            session.preview_round(make_round("a", 150, tricks={"a": 100}))
        assert session.pending is None

    def test_trick_pool_check_can_be_disabled(self):
        session = make_session(settings=GameSettings(enforce_trick_pool=False))

        preview = session.preview_round(make_round("a", 150, tricks={"a": 100}))

        assert preview.remaining_trick_points == 140
        assert preview.result.outcome == RoundOutcome.BID_FAILED

    def test_abandoned_round_skips_trick_pool_check(self):
        session = make_session()

        preview = session.preview_round(make_round("c", 200, abandoned=True))

        assert preview.result.team2_round_score == -200

    def test_invalid_round_input_propagates(self):
        session = make_session()

        with pytest.raises(InvalidInputError, match="not a member"):
            session.preview_round(make_round("zoe", 150, tricks={"a": 240}))

    def test_preview_without_game_returns_error_event(self):
        session = make_session(start=False)

        result = session.preview_round(FULL_ROUND)

        assert isinstance(result, ErrorEvent)
        assert result.code == ErrorCode.ILLEGAL_TRANSITION

    def test_undo_clears_pending_preview(self):
        session = make_session()
        session.preview_round(FULL_ROUND)
        session.commit_round()
        session.preview_round(FULL_ROUND)

        session.undo_last_round()

        assert session.pending is None
        assert session.state.game.history == ()

    def test_win_through_commit(self):
        session = make_session(target_score=170)
        session.preview_round(FULL_ROUND)

        events = session.commit_round()

        assert isinstance(events[-1], GameWonEvent)
        assert session.state.phase == LifecyclePhase.WON
        assert get_player(session.state.ledger, "a").wins == 1


class TestIllegalTransitions:
    def test_undo_with_empty_history_returns_error_event(self):
        session = make_session()
        before = session.state

        events = session.undo_last_round()

        assert events[0].code == ErrorCode.ILLEGAL_TRANSITION
        assert events[0].action == "undo_round"
        assert session.state is before

    def test_second_start_returns_error_event(self):
        session = make_session()

        events = session.start_game([TEAM1_IDS, TEAM2_IDS])

        assert events[0].code == ErrorCode.ILLEGAL_TRANSITION

    def test_discard_without_game_returns_error_event(self):
        session = make_session(start=False)

        assert session.discard()[0].code == ErrorCode.ILLEGAL_TRANSITION

    def test_deleting_seated_player_returns_error_event(self):
        session = make_session()

        events = session.delete_player("a")

        assert events[0].code == ErrorCode.ILLEGAL_TRANSITION
        assert session.state.ledger.find("a") is not None

    def test_unknown_player_raises(self):
        session = make_session(start=False)

        with pytest.raises(InvalidInputError):
            session.rename_player("zoe", "Zoe")


class TestPersistence:
    def test_every_successful_transition_saves(self):
        storage = MemoryStorage()
        session = make_session(storage)

        # four players plus start_game
        assert storage.saves == 5
        assert load_snapshot(storage.saved["scorekeeper"]) == session.state

    def test_rejected_transition_does_not_save(self):
        storage = MemoryStorage()
        session = make_session(storage)

        session.undo_last_round()

        assert storage.saves == 5

    def test_preview_does_not_save(self):
        storage = MemoryStorage()
        session = make_session(storage)

        session.preview_round(FULL_ROUND)

        assert storage.saves == 5

    def test_restore_from_storage(self):
        storage = MemoryStorage()
        session = make_session(storage)
        session.preview_round(FULL_ROUND)
        session.commit_round()

        restored = ScorekeeperSession(storage=storage)

        assert restored.restore() is True
        assert restored.state == session.state

    def test_restore_without_snapshot(self):
        assert ScorekeeperSession(storage=MemoryStorage()).restore() is False
        assert ScorekeeperSession().restore() is False

    def test_save_failure_is_logged_and_state_kept(self, caplog):
        storage = MemoryStorage(fail=True)
        session = make_session(storage)

        session.forfeit(TeamSlot.TEAM2)

        assert session.state.phase == LifecyclePhase.WON
        assert "failed to save snapshot" in caplog.text

    def test_rejected_snapshot_name_is_logged_and_state_kept(self, tmp_path, caplog):
        snapshot_dir = tmp_path / "snapshots"
        session = ScorekeeperSession(storage=LocalSnapshotStorage(snapshot_dir), snapshot_name="../escape")

        events = session.create_player("Anna", "a")

        assert events[0].player.player_id == "a"
        assert session.state.ledger.find("a") is not None
        assert "failed to save snapshot" in caplog.text
        assert not (tmp_path / "escape.json").exists()
