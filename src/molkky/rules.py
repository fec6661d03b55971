"""Scoring rules for Mölkky.

Everything in this module is a pure transformation over immutable values.
Scenes own the current :class:`GameState` and replace it wholesale with the
value returned by :func:`apply_throw`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

TARGET_SCORE = 50
BUST_SCORE = 25
MAX_MISSES = 3
MAX_PIN = 12


# --- Errors -----------------------------------------------------------------


class MolkkyError(Exception):
    """Base class for rule errors surfaced to the UI."""


class InvalidThrowError(MolkkyError, ValueError):
    pass


class InvalidPlayerError(MolkkyError, ValueError):
    pass


class GameOverError(MolkkyError):
    pass


class RuleViolationError(MolkkyError):
    pass


# --- Records ----------------------------------------------------------------


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    score: int = 0
    consecutive_misses: int = 0
    is_eliminated: bool = False
    is_active: bool = False

    def __post_init__(self) -> None:
        name = (self.name or "").strip()
        if not name:
            raise InvalidPlayerError("Player name must not be empty")
        object.__setattr__(self, "name", name)
        if not 0 <= self.score <= TARGET_SCORE:
            raise InvalidPlayerError(f"Score {self.score} outside 0..{TARGET_SCORE}")
        if not 0 <= self.consecutive_misses <= MAX_MISSES:
            raise InvalidPlayerError(
                f"Consecutive misses {self.consecutive_misses} outside 0..{MAX_MISSES}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "consecutive_misses": self.consecutive_misses,
            "is_eliminated": self.is_eliminated,
            "is_active": self.is_active,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Player":
        return Player(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            score=int(data.get("score", 0)),
            consecutive_misses=int(data.get("consecutive_misses", 0)),
            is_eliminated=bool(data.get("is_eliminated", False)),
            is_active=bool(data.get("is_active", False)),
        )


@dataclass(frozen=True)
class ThrowRecord:
    """One applied throw, as kept in :attr:`GameState.history`."""

    player_id: str
    player_name: str
    round: int
    points: int
    total_score: int
    busted: bool = False
    missed: bool = False
    eliminated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "round": self.round,
            "points": self.points,
            "total_score": self.total_score,
            "busted": self.busted,
            "missed": self.missed,
            "eliminated": self.eliminated,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ThrowRecord":
        return ThrowRecord(
            player_id=str(data.get("player_id", "")),
            player_name=str(data.get("player_name", "")),
            round=int(data.get("round", 1)),
            points=int(data.get("points", 0)),
            total_score=int(data.get("total_score", 0)),
            busted=bool(data.get("busted", False)),
            missed=bool(data.get("missed", False)),
            eliminated=bool(data.get("eliminated", False)),
        )


@dataclass(frozen=True)
class Evaluation:
    game_over: bool
    winner: Optional[Player] = None


@dataclass(frozen=True)
class GameState:
    players: Tuple[Player, ...]
    current_player_index: int = 0
    round: int = 1
    game_over: bool = False
    winner: Optional[Player] = None
    history: Tuple[ThrowRecord, ...] = field(default_factory=tuple)

    @property
    def active_player(self) -> Optional[Player]:
        for player in self.players:
            if player.is_active:
                return player
        return None

    @property
    def is_draw(self) -> bool:
        return self.game_over and self.winner is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "players": [p.to_dict() for p in self.players],
            "current_player_index": self.current_player_index,
            "round": self.round,
            "game_over": self.game_over,
            "winner_id": self.winner.id if self.winner else None,
            "history": [h.to_dict() for h in self.history],
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "GameState":
        raw_players = data.get("players", [])
        players = tuple(Player.from_dict(p) for p in raw_players if isinstance(p, Mapping))
        if not players:
            raise InvalidPlayerError("Saved game has no players")
        index = int(data.get("current_player_index", 0))
        if not 0 <= index < len(players):
            raise InvalidPlayerError(f"Current player index {index} out of range")
        game_over = bool(data.get("game_over", False))
        if not game_over and players[index].is_eliminated:
            raise InvalidPlayerError(f"Current player {players[index].name} is eliminated")
        # The pointer is authoritative; saved is_active flags are not
        players = tuple(
            replace(p, is_active=(i == index and not game_over)) for i, p in enumerate(players)
        )
        winner_id = data.get("winner_id")
        winner = next((p for p in players if p.id == winner_id), None) if winner_id else None
        history = tuple(
            ThrowRecord.from_dict(h) for h in data.get("history", []) if isinstance(h, Mapping)
        )
        return GameState(
            players=players,
            current_player_index=index,
            round=max(1, int(data.get("round", 1))),
            game_over=game_over,
            winner=winner,
            history=history,
        )


# --- Game creation ----------------------------------------------------------


def create_game(names: Iterable[str]) -> GameState:
    """Return a fresh game: scores zero, first player active, round 1."""

    cleaned = [str(n).strip() if n is not None else "" for n in names]
    if not cleaned:
        raise InvalidPlayerError("At least one player is required")
    players = tuple(
        Player(id=f"player-{i}", name=name, is_active=(i == 0))
        for i, name in enumerate(cleaned)
    )
    return GameState(players=players)


# --- Turn engine ------------------------------------------------------------


def next_player_index(state: GameState) -> int:
    """Index of the next non-eliminated player after the current one.

    When every player is eliminated the scan stops after one cycle and the
    starting candidate is returned.
    """

    count = len(state.players)
    start = (state.current_player_index + 1) % count
    index = start
    for _ in range(count):
        if not state.players[index].is_eliminated:
            return index
        index = (index + 1) % count
    return start


# --- Win detection ----------------------------------------------------------


def evaluate(players: Sequence[Player]) -> Evaluation:
    at_target = [p for p in players if p.score == TARGET_SCORE]
    if len(at_target) > 1:
        names = ", ".join(p.name for p in at_target)
        raise RuleViolationError(f"More than one player at {TARGET_SCORE}: {names}")
    if at_target:
        return Evaluation(game_over=True, winner=at_target[0])

    remaining = [p for p in players if not p.is_eliminated]
    if len(remaining) == 1 and len(players) >= 2:
        return Evaluation(game_over=True, winner=remaining[0])
    if not remaining:
        return Evaluation(game_over=True, winner=None)
    return Evaluation(game_over=False)


# --- Scoring ----------------------------------------------------------------


def _validate_points(points: Any) -> int:
    # bool is an int subclass; True must not count as a one-point throw
    if isinstance(points, bool) or not isinstance(points, int):
        raise InvalidThrowError(f"Throw value must be an integer, got {points!r}")
    if not 0 <= points <= MAX_PIN:
        raise InvalidThrowError(f"Throw value {points} outside 0..{MAX_PIN}")
    return points


def apply_throw(state: GameState, points: int) -> GameState:
    """Apply one throw worth ``points`` for the active player."""

    points = _validate_points(points)
    if state.game_over:
        raise GameOverError("The game is already over")

    index = state.current_player_index
    thrower = state.players[index]
    busted = False

    if points == 0:
        misses = thrower.consecutive_misses + 1
        updated = replace(
            thrower,
            consecutive_misses=misses,
            is_eliminated=thrower.is_eliminated or misses >= MAX_MISSES,
            is_active=False,
        )
    else:
        tentative = thrower.score + points
        busted = tentative > TARGET_SCORE
        updated = replace(
            thrower,
            score=BUST_SCORE if busted else tentative,
            consecutive_misses=0,
            is_active=False,
        )

    players = [replace(p, is_active=False) for p in state.players]
    players[index] = updated

    record = ThrowRecord(
        player_id=updated.id,
        player_name=updated.name,
        round=state.round,
        points=points,
        total_score=updated.score,
        busted=busted,
        missed=points == 0,
        eliminated=updated.is_eliminated and not thrower.is_eliminated,
    )

    moved = replace(state, players=tuple(players))
    next_index = next_player_index(moved)
    outcome = evaluate(players)
    if not outcome.game_over:
        players[next_index] = replace(players[next_index], is_active=True)

    return GameState(
        players=tuple(players),
        current_player_index=next_index,
        round=state.round + 1 if next_index <= index else state.round,
        game_over=outcome.game_over,
        winner=outcome.winner,
        history=state.history + (record,),
    )


def points_for_knocked(pins: Iterable[int]) -> int:
    """Score for a set of knocked pins: one pin counts its number, several count one each."""

    knocked: List[int] = list(pins)
    if len(set(knocked)) != len(knocked):
        raise InvalidThrowError(f"Knocked pins must be distinct: {knocked}")
    for pin in knocked:
        if isinstance(pin, bool) or not isinstance(pin, int) or not 1 <= pin <= MAX_PIN:
            raise InvalidThrowError(f"Pin {pin!r} outside 1..{MAX_PIN}")
    if not knocked:
        return 0
    if len(knocked) == 1:
        return knocked[0]
    return len(knocked)


def player_ranking(players: Sequence[Player]) -> List[Player]:
    return sorted(players, key=lambda p: (p.is_eliminated, -p.score))
