from dataclasses import replace
from typing import List

import pytest

from molkky.rules import (
    BUST_SCORE,
    TARGET_SCORE,
    GameOverError,
    GameState,
    InvalidPlayerError,
    InvalidThrowError,
    MolkkyError,
    Player,
    RuleViolationError,
    apply_throw,
    create_game,
    evaluate,
    next_player_index,
    player_ranking,
    points_for_knocked,
)


def _play(state: GameState, throws: List[int]) -> GameState:
    for points in throws:
        state = apply_throw(state, points)
    return state


def _with_scores(state: GameState, **scores: int) -> GameState:
    players = tuple(
        replace(p, score=scores.get(p.name, p.score)) for p in state.players
    )
    return replace(state, players=players)


# --- create_game -------------------------------------------------------------


def test_create_game_starts_with_first_player_active() -> None:
    state = create_game(["Alice", "Bob", "Cara"])
    assert [p.name for p in state.players] == ["Alice", "Bob", "Cara"]
    assert [p.score for p in state.players] == [0, 0, 0]
    assert [p.is_active for p in state.players] == [True, False, False]
    assert state.current_player_index == 0
    assert state.round == 1
    assert not state.game_over
    assert state.winner is None
    assert state.history == ()


def test_create_game_strips_names_and_assigns_ids() -> None:
    state = create_game(["  Alice ", "Bob"])
    assert state.players[0].name == "Alice"
    assert [p.id for p in state.players] == ["player-0", "player-1"]


@pytest.mark.parametrize("names", [[], ["Alice", "   "], ["", "Bob"]])
def test_create_game_rejects_bad_rosters(names) -> None:
    with pytest.raises(InvalidPlayerError):
        create_game(names)


# --- apply_throw -------------------------------------------------------------


def test_hit_adds_points_and_passes_turn() -> None:
    state = apply_throw(create_game(["Alice", "Bob"]), 7)
    alice, bob = state.players
    assert alice.score == 7
    assert not alice.is_active
    assert bob.is_active
    assert state.current_player_index == 1
    assert state.round == 1


def test_round_increments_after_wrap() -> None:
    state = _play(create_game(["Alice", "Bob"]), [3, 4])
    assert state.round == 2
    assert state.current_player_index == 0
    assert state.players[0].is_active


def test_round_counts_passes_after_elimination() -> None:
    state = _play(create_game(["Alice", "Bob", "Cara"]), [0, 1, 1, 0, 1, 1, 0])
    assert state.players[0].is_eliminated
    start = state.round
    state = _play(state, [1, 1])
    assert state.round == start + 1
    assert state.active_player.name == "Bob"


def test_round_of_winning_throw_with_last_seat_eliminated() -> None:
    state = _play(create_game(["Alice", "Bob", "Cara"]), [1, 1, 0] * 3)
    assert state.players[2].is_eliminated
    assert state.round == 4
    state = _play(state, [2, 2])
    assert state.round == 5
    assert state.active_player.name == "Alice"
    state = _with_scores(state, Bob=40)
    state = _play(state, [1, 10])
    assert state.game_over
    assert state.winner.name == "Bob"
    assert state.history[-1].round == 5


def test_exceeding_target_resets_to_bust_score() -> None:
    state = _with_scores(create_game(["Alice", "Bob"]), Alice=45)
    state = apply_throw(state, 10)
    assert state.players[0].score == BUST_SCORE
    assert state.history[-1].busted
    assert not state.game_over


def test_hit_resets_consecutive_misses() -> None:
    state = _play(create_game(["Alice", "Bob"]), [0, 1, 0, 1, 5])
    assert state.players[0].consecutive_misses == 0
    assert state.players[0].score == 5


def test_three_misses_eliminate() -> None:
    state = _play(create_game(["Alice", "Bob", "Cara"]), [0, 1, 1, 0, 1, 1, 0])
    alice = state.players[0]
    assert alice.consecutive_misses == 3
    assert alice.is_eliminated
    assert state.history[-1].eliminated
    assert not state.game_over


def test_eliminated_player_is_skipped() -> None:
    state = _play(create_game(["Alice", "Bob", "Cara"]), [0, 1, 1, 0, 1, 1, 0])
    # Alice is out; after Bob comes Cara, then Bob again
    assert state.active_player.name == "Bob"
    state = apply_throw(state, 2)
    assert state.active_player.name == "Cara"
    state = apply_throw(state, 2)
    assert state.active_player.name == "Bob"


def test_exactly_fifty_wins() -> None:
    state = _with_scores(create_game(["Alice", "Bob"]), Alice=40)
    state = apply_throw(state, 10)
    assert state.game_over
    assert state.winner.name == "Alice"
    assert state.winner.score == TARGET_SCORE
    assert state.active_player is None
    assert not state.is_draw


def test_last_player_standing_wins() -> None:
    # Alice 6, Bob 0, Alice 10, Bob 0, Alice 10, Bob 0
    state = _play(create_game(["Alice", "Bob"]), [6, 0, 10, 0, 10, 0])
    alice, bob = state.players
    assert alice.score == 26
    assert bob.is_eliminated
    assert state.game_over
    assert state.winner.name == "Alice"
    assert [h.points for h in state.history] == [6, 0, 10, 0, 10, 0]


def test_single_player_game_is_not_over_until_fifty() -> None:
    state = _play(create_game(["Solo"]), [12, 12, 12])
    assert not state.game_over
    assert state.round == 4
    state = _play(state, [12, 2])
    assert state.game_over
    assert state.winner.name == "Solo"


def test_single_player_eliminated_is_a_draw() -> None:
    state = _play(create_game(["Solo"]), [0, 0, 0])
    assert state.game_over
    assert state.is_draw


@pytest.mark.parametrize("points", [-1, 13, 44, 2.0, "5", None, True])
def test_invalid_points_rejected(points) -> None:
    state = create_game(["Alice", "Bob"])
    with pytest.raises(InvalidThrowError):
        apply_throw(state, points)


def test_invalid_throw_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        apply_throw(create_game(["Alice"]), 99)


def test_throw_after_game_over_raises() -> None:
    state = _play(create_game(["Alice", "Bob"]), [6, 0, 10, 0, 10, 0])
    with pytest.raises(GameOverError):
        apply_throw(state, 3)


def test_apply_throw_does_not_mutate_input() -> None:
    state = create_game(["Alice", "Bob"])
    apply_throw(state, 9)
    assert state.players[0].score == 0
    assert state.players[0].is_active
    assert state.history == ()


def test_scores_stay_in_range_over_random_play() -> None:
    import random

    rng = random.Random(1234)
    for _ in range(50):
        state = create_game(["A", "B", "C"])
        while not state.game_over:
            state = apply_throw(state, rng.randint(0, 12))
            for p in state.players:
                assert 0 <= p.score <= TARGET_SCORE
                assert 0 <= p.consecutive_misses <= 3
            assert sum(p.is_active for p in state.players) == (0 if state.game_over else 1)


# --- next_player_index / evaluate -------------------------------------------


def test_next_player_index_returns_start_when_all_eliminated() -> None:
    state = create_game(["A", "B", "C"])
    players = tuple(replace(p, is_eliminated=True) for p in state.players)
    assert next_player_index(replace(state, players=players)) == 1


def test_evaluate_rejects_two_players_at_target() -> None:
    players = [Player("a", "A", score=50), Player("b", "B", score=50)]
    with pytest.raises(RuleViolationError):
        evaluate(players)


def test_evaluate_everyone_out_has_no_winner() -> None:
    players = [Player("a", "A", is_eliminated=True), Player("b", "B", is_eliminated=True)]
    outcome = evaluate(players)
    assert outcome.game_over
    assert outcome.winner is None


def test_player_rejects_out_of_range_fields() -> None:
    with pytest.raises(InvalidPlayerError):
        Player("a", "A", score=51)
    with pytest.raises(InvalidPlayerError):
        Player("a", "A", consecutive_misses=4)


def test_errors_share_base_class() -> None:
    for exc in (InvalidThrowError, InvalidPlayerError, GameOverError, RuleViolationError):
        assert issubclass(exc, MolkkyError)


# --- helpers -----------------------------------------------------------------


@pytest.mark.parametrize(
    "pins, expected",
    [
        ([], 0),
        ([9], 9),
        ([12], 12),
        ([3, 7], 2),
        ([1, 2, 3, 4, 5], 5),
    ],
)
def test_points_for_knocked(pins, expected) -> None:
    assert points_for_knocked(pins) == expected


@pytest.mark.parametrize("pins", [[0], [13], [4, 4], [True]])
def test_points_for_knocked_rejects_bad_pins(pins) -> None:
    with pytest.raises(InvalidThrowError):
        points_for_knocked(pins)


def test_player_ranking_puts_eliminated_last() -> None:
    players = [
        Player("a", "A", score=10),
        Player("b", "B", score=40, is_eliminated=True),
        Player("c", "C", score=30),
    ]
    assert [p.name for p in player_ranking(players)] == ["C", "A", "B"]


def test_game_state_round_trips_through_dict() -> None:
    state = _play(create_game(["Alice", "Bob"]), [6, 0, 10])
    restored = GameState.from_dict(state.to_dict())
    assert restored == state


def test_game_state_from_dict_keeps_winner() -> None:
    state = _play(create_game(["Alice", "Bob"]), [6, 0, 10, 0, 10, 0])
    restored = GameState.from_dict(state.to_dict())
    assert restored.winner == state.winner


@pytest.mark.parametrize(
    "data",
    [
        {"players": []},
        {"players": [{"id": "a", "name": "A"}], "current_player_index": 3},
        {"players": [{"id": "a", "name": ""}]},
    ],
)
def test_game_state_from_dict_rejects_bad_data(data) -> None:
    with pytest.raises(InvalidPlayerError):
        GameState.from_dict(data)


def test_game_state_from_dict_rebuilds_active_flag_from_pointer() -> None:
    data = _play(create_game(["Alice", "Bob", "Cara"]), [4]).to_dict()
    for raw in data["players"]:
        raw["is_active"] = True
    restored = GameState.from_dict(data)
    assert [p.is_active for p in restored.players] == [False, True, False]
    assert restored.active_player.name == "Bob"


def test_game_state_from_dict_clears_active_flag_when_over() -> None:
    data = _play(create_game(["Alice", "Bob"]), [6, 0, 10, 0, 10, 0]).to_dict()
    data["players"][0]["is_active"] = True
    restored = GameState.from_dict(data)
    assert restored.active_player is None


def test_game_state_from_dict_rejects_pointer_on_eliminated_player() -> None:
    data = _play(create_game(["Alice", "Bob", "Cara"]), [0, 1, 1, 0, 1, 1, 0]).to_dict()
    data["current_player_index"] = 0
    with pytest.raises(InvalidPlayerError):
        GameState.from_dict(data)
