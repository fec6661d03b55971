"""Move advisor: suggests which pins to aim for next.

The probabilities attached to each suggestion are fixed heuristics chosen to
rank the cases against each other. They are not calibrated estimates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Sequence, Tuple, Union

from molkky.rules import BUST_SCORE, MAX_PIN, TARGET_SCORE, GameState

# Numeric bands used to guess which pins tend to fall together.
PIN_BANDS: Tuple[Tuple[int, int], ...] = ((1, 4), (5, 8), (9, 12))
MAX_CLUSTER = 3
THREAT_MARGIN = 10


class MoveKind(str, Enum):
    DIRECT_WIN = "direct_win"
    APPROACH = "approach"
    COUNT_WIN = "count_win"
    CLUSTER = "cluster"
    NO_SAFE_MOVE = "no_safe_move"
    AT_TARGET = "at_target"
    BUST = "bust"
    NO_MOVE = "no_move"


@dataclass(frozen=True)
class PinState:
    number: int
    is_standing: bool = True
    position: Tuple[float, float] = (0.0, 0.0)

    def __post_init__(self) -> None:
        if isinstance(self.number, bool) or not isinstance(self.number, int):
            raise ValueError(f"Pin number must be an integer, got {self.number!r}")
        if not 1 <= self.number <= MAX_PIN:
            raise ValueError(f"Pin number {self.number} outside 1..{MAX_PIN}")


@dataclass(frozen=True)
class Alternative:
    """A lesser play offered next to the main recommendation."""

    target_pins: Tuple[int, ...]
    expected_score: int
    priority: str
    reason: str


PRIORITY_ORDER = {"High": 0, "Medium": 1, "Low": 2}
HIGH_VALUE_PIN = 8
STEADY_PIN = 6


@dataclass(frozen=True)
class OptimalMove:
    kind: MoveKind
    target_pins: Tuple[int, ...]
    expected_score: int
    win_probability: float
    current_score: int
    recommendation: str
    strategy_explanation: str
    difficulty: str = ""
    available_pins: Tuple[PinState, ...] = field(default_factory=tuple)
    alternatives: Tuple[Alternative, ...] = field(default_factory=tuple)

    @property
    def has_target(self) -> bool:
        return bool(self.target_pins)


PinLike = Union[PinState, int]


def _as_pin(pin: PinLike) -> PinState:
    if isinstance(pin, PinState):
        return pin
    return PinState(number=pin)


def standing_numbers(pins: Iterable[PinLike]) -> List[int]:
    """Sorted numbers of the standing pins."""

    return sorted({p.number for p in map(_as_pin, pins) if p.is_standing})


def throw_value(targets: Sequence[int]) -> int:
    if not targets:
        return 0
    if len(targets) == 1:
        return targets[0]
    return len(targets)


def difficulty(targets: Sequence[int]) -> str:
    if not targets:
        return ""
    if len(targets) == 1:
        if targets[0] <= 4:
            return "Easy"
        if targets[0] <= 8:
            return "Medium"
        return "Hard"
    if len(targets) == 2:
        return "Medium"
    return "Hard"


def _cluster(standing: Sequence[int]) -> List[int]:
    best: List[int] = []
    for low, high in PIN_BANDS:
        band = [n for n in standing if low <= n <= high]
        # >= so that later (higher) bands win ties
        if band and len(band) >= len(best):
            best = band
    return sorted(best, reverse=True)[:MAX_CLUSTER]


def _threat_note(score: int, opponent_scores: Sequence[int]) -> str:
    if TARGET_SCORE - score <= THREAT_MARGIN:
        return ""
    close = [s for s in opponent_scores if TARGET_SCORE - s <= THREAT_MARGIN]
    if not close:
        return ""
    return (
        f" An opponent is within {TARGET_SCORE - max(close)} points of winning;"
        " keep pace with steady hits."
    )


def _alternatives(
    standing: Sequence[int], need: int, threatened: bool, primary: Sequence[int]
) -> Tuple[Alternative, ...]:
    """Backup plays ranked by priority; none of them can bust."""
    plays: List[Alternative] = []
    if need > MAX_PIN:
        high = [n for n in standing if n >= HIGH_VALUE_PIN]
        if high:
            pin = max(high)
            plays.append(Alternative((pin,), pin, "High", f"Pin #{pin} alone adds the most points."))
    else:
        safe = [n for n in standing if n < need]
        if safe:
            pin = max(safe)
            plays.append(Alternative((pin,), pin, "Medium", f"Pin #{pin} stays under {TARGET_SCORE}."))
    if threatened:
        steady = [n for n in standing if n <= need]
        if steady:
            pin = min(steady, key=lambda n: (abs(n - STEADY_PIN), n))
            plays.append(Alternative((pin,), pin, "Medium", "Keep pace with the players close to winning."))

    seen = {tuple(primary)}
    ranked: List[Alternative] = []
    for play in sorted(plays, key=lambda p: PRIORITY_ORDER[p.priority]):
        if play.target_pins not in seen:
            seen.add(play.target_pins)
            ranked.append(play)
    return tuple(ranked)


def recommend(
    pins: Iterable[PinLike],
    active_player_score: int,
    opponent_scores: Sequence[int] = (),
) -> OptimalMove:
    """Suggest a target for a player on ``active_player_score``.

    ``pins`` may hold :class:`PinState` values (only standing pins are
    considered) or bare pin numbers, which count as standing.
    """

    available = tuple(_as_pin(p) for p in pins)
    standing = standing_numbers(available)
    score = int(active_player_score)
    need = TARGET_SCORE - score
    note = _threat_note(score, opponent_scores)

    def move(
        kind: MoveKind,
        targets: Sequence[int],
        probability: float,
        recommendation: str,
        explanation: str,
    ) -> OptimalMove:
        return OptimalMove(
            kind=kind,
            target_pins=tuple(targets),
            expected_score=throw_value(targets),
            win_probability=round(max(0.0, min(1.0, probability)), 2),
            current_score=score,
            recommendation=recommendation,
            strategy_explanation=explanation + note,
            difficulty=difficulty(targets),
            available_pins=available,
            alternatives=_alternatives(standing, need, bool(note), targets),
        )

    if not standing:
        return move(
            MoveKind.NO_MOVE, [], 0.0,
            "No standing pins to aim for.",
            "Set the pins back up or load a new photo before asking for advice.",
        )

    if need == 0:
        return move(
            MoveKind.AT_TARGET, [], 1.0,
            f"You are already on {TARGET_SCORE}.",
            f"A score of exactly {TARGET_SCORE} wins the game; no throw is needed.",
        )
    if need < 0:
        return move(
            MoveKind.BUST, [], 0.0,
            f"Score is over {TARGET_SCORE} and resets to {BUST_SCORE}.",
            f"Going past {TARGET_SCORE} drops the score back to {BUST_SCORE}."
            f" Aim for exactly {TARGET_SCORE - BUST_SCORE} more points after the reset.",
        )

    if need in standing:
        return move(
            MoveKind.DIRECT_WIN, [need], 0.8,
            f"Aim for pin #{need} to win the game!",
            f"You need exactly {need} points to reach {TARGET_SCORE}."
            f" Knock down pin #{need} on its own for the win.",
        )

    if need <= MAX_PIN:
        safe = [n for n in standing if n < need]
        if safe:
            pin = max(safe)
            left = need - pin
            return move(
                MoveKind.APPROACH, [pin], max(0.2, 0.6 - 0.05 * left),
                f"Aim for pin #{pin} to get closer to winning.",
                f"You need {need} points to win. Pin #{pin} on its own leaves {left}"
                f" without going over {TARGET_SCORE}.",
            )
        if 2 <= need <= len(standing):
            targets = standing[:need]
            return move(
                MoveKind.COUNT_WIN, targets, 0.4,
                f"Knock down exactly {need} pins at once to win.",
                f"Every single pin is worth more than the {need} points you need,"
                f" but {need} pins falling together score exactly {need}.",
            )
        return move(
            MoveKind.NO_SAFE_MOVE, [], 0.0,
            "Every hit would bust; consider a deliberate miss.",
            f"You need {need} points and every possible hit scores more,"
            f" which would reset you to {BUST_SCORE}. A miss keeps your score"
            f" but counts toward elimination.",
        )

    targets = _cluster(standing)
    gained = throw_value(targets)
    remaining = need - gained
    probability = max(0.1, min(0.5, 1 - remaining / TARGET_SCORE - 0.05 * len(targets)))
    if len(targets) > 1:
        recommendation = f"Try to knock down {len(targets)} pins at once."
        explanation = (
            f"You need {need} points to win. Knocking down pins"
            f" {', '.join(f'#{n}' for n in targets)} scores {gained}"
            f" and leaves {remaining} to go."
        )
    else:
        recommendation = f"Aim for pin #{targets[0]}."
        explanation = (
            f"You need {need} points to win. Pin #{targets[0]} scores {gained}"
            f" and leaves {remaining} to go."
        )
    return move(MoveKind.CLUSTER, targets, probability, recommendation, explanation)


def advise(state: GameState, pins: Iterable[PinLike]) -> OptimalMove:
    """Run :func:`recommend` for the active player of ``state``."""

    active = state.active_player
    if active is None:
        active = state.players[state.current_player_index]
    others = [
        p.score for p in state.players if p.id != active.id and not p.is_eliminated
    ]
    return recommend(pins, active.score, opponent_scores=others)


def summarize(move: OptimalMove) -> List[str]:
    """Lines for the recommendation card."""

    lines = [move.recommendation]
    if move.target_pins:
        pins = ", ".join(f"#{n}" for n in move.target_pins)
        lines.append(f"Targets: {pins}  ({move.difficulty})")
        lines.append(
            f"Expected: +{move.expected_score}   Win chance (rough): {int(move.win_probability * 100)}%"
        )
    lines.append(move.strategy_explanation)
    for alt in move.alternatives:
        pins = ", ".join(f"#{n}" for n in alt.target_pins)
        lines.append(f"Also ({alt.priority.lower()}): {pins}. {alt.reason}")
    return lines

