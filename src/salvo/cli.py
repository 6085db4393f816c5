"""Simple command-line driver for playing Salvo against the computer."""

from __future__ import annotations

import argparse
from typing import Mapping, Sequence

from salvo.engine.coordinates import BOARD_SIZE, FIRST_COLUMN, LAST_COLUMN, ROW_LABELS, Coordinate
from salvo.engine.errors import PlacementExhaustedError, TargetSpaceExhaustedError
from salvo.engine.fleet import Side
from salvo.engine.game import ActionResult, Match, MatchPhase, MatchState
from salvo.engine.rules import MatchRules
from salvo.engine.ship import SegmentHealth
from salvo.engine.shots import ShotRecord, ShotResult
from salvo.telemetry import init_telemetry

REJECTION_MESSAGES = {
    "invalid_coordinate": "Use a cell between A1 and J10, e.g. C7.",
    "already_targeted": "That cell has already been targeted. Choose another.",
    "not_your_turn": "Hold fire, it is not your turn.",
    "game_not_in_progress": "The match is over.",
}


def format_board(
    segments: Mapping[Coordinate, tuple[str, SegmentHealth]],
    shots: Mapping[Coordinate, ShotRecord],
    show_ships: bool,
) -> str:
    """Render one board; letters run across the top and numbers down the side."""
    sunk = {record.sunk_ship_identity for record in shots.values() if record.sunk_ship_identity}
    header = "    " + " ".join(f"{label:>2}" for label in ROW_LABELS)
    lines = [header]
    for col in range(FIRST_COLUMN, LAST_COLUMN + 1):
        symbols = []
        for row in range(BOARD_SIZE):
            coord = Coordinate(row, col)
            record = shots.get(coord)
            identity = segments[coord][0] if coord in segments else None
            if record is not None and record.result is ShotResult.HIT:
                symbol = identity[0] if identity in sunk else "X"
            elif record is not None:
                symbol = "o"
            else:
                symbol = "S" if show_ships and identity else "."
            symbols.append(f"{symbol:>2}")
        lines.append(f"{col:>2} |" + " ".join(symbols))
    return "\n".join(lines)


def render(state: MatchState, reveal: bool = False) -> str:
    own = format_board(state.fleets[Side.HUMAN], state.shots[Side.OPPONENT], show_ships=True)
    enemy = format_board(state.fleets[Side.OPPONENT], state.shots[Side.HUMAN], show_ships=reveal)
    return f"Your Board:\n{own}\n\nEnemy Waters:\n{enemy}"


def describe_shot(side: Side, result: ActionResult) -> str:
    outcome = result.outcome
    if outcome is None:
        return REJECTION_MESSAGES.get(result.reason or "", "Shot rejected.")
    who = "You" if side is Side.HUMAN else "The opponent"
    if outcome.is_sunk:
        text = f"sank the {outcome.ship_identity}!"
    else:
        text = "hit" if outcome.hit else "miss"
    return f"{who} fired at {outcome.coordinate}: {text}"


def play_game(seed: int | None = None, single_shot_opponent: bool = False, reveal: bool = False) -> int:
    print("Welcome to Salvo!\n")
    overrides: dict[str, object] = {}
    if seed is not None:
        overrides["seed"] = seed
    if single_shot_opponent:
        overrides["opponent_hit_grants_extra_shot"] = False
    match = Match(rules=MatchRules.from_env(**overrides))

    try:
        match.start()
    except PlacementExhaustedError as exc:
        print(f"Could not set up the fleets: {exc}")
        return 1

    while match.phase is MatchPhase.IN_PROGRESS:
        if match.active_turn is Side.HUMAN:
            print()
            print(render(match.snapshot(), reveal=reveal))
            raw = input("Enter target coordinate (e.g., A5) or 'q' to quit: ").strip()
            if raw.lower() == "q":
                raise SystemExit("Goodbye!")
            result = match.fire_at(raw)
            print(describe_shot(Side.HUMAN, result))
        else:
            try:
                result = match.opponent_fires()
            except TargetSpaceExhaustedError as exc:
                print(f"The match cannot continue: {exc}")
                return 1
            print(describe_shot(Side.OPPONENT, result))

    print()
    print(render(match.snapshot(), reveal=True))
    if match.phase is MatchPhase.WON:
        print("\nCongratulations, you sank the whole enemy fleet!")
    else:
        print("\nThe opponent sank your fleet. Better luck next battle!")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Play Salvo via the CLI.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument(
        "--single-shot-opponent",
        action="store_true",
        help="The opponent fires once per turn even when it hits.",
    )
    parser.add_argument("--reveal", action="store_true", help="Show the enemy fleet.")
    args = parser.parse_args(argv)
    init_telemetry()
    return play_game(seed=args.seed, single_shot_opponent=args.single_shot_opponent, reveal=args.reveal)


if __name__ == "__main__":
    raise SystemExit(main())
