"""Print player standings and the active game from the saved snapshot.

Usage: uv run python bin/print-standings.py [snapshot_name]

Reads SCOREKEEPER_SNAPSHOT_DIR and SCOREKEEPER_SNAPSHOT_NAME like the session does.
"""

import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from scorekeeper.logic.scoring import score_progress
from scorekeeper.session.settings import ScorekeeperSettings
from scorekeeper.session.snapshot import load_snapshot
from shared.logging import setup_logging
from shared.storage import LocalSnapshotStorage


def main() -> None:
    if len(sys.argv) > 2:
        print(f"Usage: {sys.argv[0]} [snapshot_name]")
        sys.exit(1)

    settings = ScorekeeperSettings()
    setup_logging(settings.log_dir)
    name = sys.argv[1] if len(sys.argv) == 2 else settings.snapshot_name
    content = LocalSnapshotStorage(settings.snapshot_dir).load_snapshot(name)
    if content is None:
        print(f"No snapshot named {name!r} in {settings.snapshot_dir}")
        sys.exit(1)

    state = load_snapshot(content)
    players = sorted(state.ledger.players, key=lambda p: p.lifetime_score, reverse=True)
    print(f"{'Player':<20} {'Score':>8} {'Games':>6} {'Wins':>5}")
    for player in players:
        print(f"{player.name:<20} {player.lifetime_score:>8} {player.games_played:>6} {player.wins:>5}")

    if state.game is None:
        return
    print()
    print(f"Game ({state.phase.value}), target {state.game.target_score}, {state.game.round_count} rounds")
    for team in (state.game.teams.team1, state.game.teams.team2):
        progress = score_progress(team.score, state.game.target_score)
        print(f"  {team.name:<30} {team.score:>6}  {progress:5.1f}%")


if __name__ == "__main__":
    main()
