from __future__ import annotations

import pytest

from bingo_eval.core.evaluator import ALREADY_CALLED, APPLIED
from bingo_eval.errors import InvalidNumber, SessionEnded
from bingo_eval.rng import create_rng
from bingo_eval.session import (
    AI,
    ENDED,
    IN_PROGRESS,
    NOT_STARTED,
    NOT_YOUR_TURN,
    PLAYER,
    SESSION_ENDED,
    GameSession,
    VersusAIGame,
)


def test_state_machine_and_single_winner(row_major_board):
    session = GameSession({"solo": row_major_board})
    assert session.state == NOT_STARTED
    assert session.outcome is None
    for n in range(1, 21):
        out = session.call_number(n)
        assert out.applied
        assert session.state == IN_PROGRESS
    out = session.call_number(21)
    assert out.winners == ("solo",)
    assert out.is_tie is False
    assert session.state == ENDED
    assert session.outcome == "win"


def test_calls_after_end_are_rejected(row_major_board):
    session = GameSession({"solo": row_major_board})
    for n in range(1, 22):
        session.call_number(n)
    out = session.call_number(22)
    assert out.applied is False
    assert out.reason == SESSION_ENDED
    assert 22 not in session.called
    with pytest.raises(SessionEnded):
        session.call_number(22, strict=True)


def test_invalid_number_raises_even_after_end(row_major_board):
    session = GameSession({"solo": row_major_board})
    session.abandon()
    with pytest.raises(InvalidNumber):
        session.call_number(0)


def test_repeat_call_is_ignored(row_major_board):
    session = GameSession({"solo": row_major_board})
    session.call_number(5)
    out = session.call_number(5)
    assert out.applied is False
    assert out.reason == ALREADY_CALLED
    assert session.history == [5]


def test_tie_records_both_parties(row_major_board, transposed_board):
    session = GameSession({"a": row_major_board, "b": transposed_board})
    for n in range(1, 21):
        session.call_number(n)
    out = session.call_number(21)
    assert out.winners == ("a", "b")
    assert out.is_tie
    assert session.outcome == "tie"
    assert out.snapshots["a"].has_won and out.snapshots["b"].has_won


def test_listeners_receive_each_applied_call(row_major_board):
    session = GameSession({"solo": row_major_board})
    seen = []
    unsubscribe = session.subscribe(seen.append)
    session.call_number(1)
    session.call_number(1)
    session.call_number(2)
    unsubscribe()
    session.call_number(3)
    assert [o.number for o in seen] == [1, 2]
    assert seen[-1].reason == APPLIED


def test_new_lines_are_reported(row_major_board):
    session = GameSession({"solo": row_major_board})
    for n in (1, 2, 3, 4):
        assert session.call_number(n).new_lines == {}
    assert session.call_number(5).new_lines == {"solo": (0,)}


def test_abandon_has_no_winner(row_major_board):
    session = GameSession({"solo": row_major_board})
    session.call_number(1)
    session.abandon()
    assert session.state == ENDED
    assert session.outcome == "abandoned"
    assert session.winners == ()


def test_empty_session_rejected():
    with pytest.raises(ValueError):
        GameSession({})


def test_versus_ai_alternates_turns():
    game = VersusAIGame(create_rng("py_random", 7))
    number = game.session.boards[PLAYER][0]
    turn = game.player_pick(number)
    assert turn.applied
    assert turn.ai is not None
    assert game.last_player_choice == number
    assert game.last_ai_choice in game.session.called
    assert game.session.history[0] == number
    assert len(game.session.history) == 2
    assert game.is_player_turn


def test_versus_ai_rejects_repeat_and_wrong_turn():
    game = VersusAIGame(create_rng("py_random", 11))
    game.player_pick(1)
    again = game.player_pick(1)
    assert again.applied is False
    assert again.reason == ALREADY_CALLED
    game.is_player_turn = False
    assert game.player_pick(2).reason == NOT_YOUR_TURN


def test_versus_ai_plays_to_an_end():
    rng = create_rng("py_random", 3)
    game = VersusAIGame(rng)
    for n in range(1, 26):
        if game.ended:
            break
        game.player_pick(n)
    assert game.ended
    assert game.winner_message in ("You Win!", "AI Wins!", "It's a tie!")
    assert game.player_pick(1).reason == SESSION_ENDED


def test_ai_turn_skips_when_nothing_left():
    game = VersusAIGame(create_rng("py_random", 5))
    game.session.history.extend(range(1, 26))
    assert game.ai_turn() is None


def test_end_game_deals_fresh_boards():
    game = VersusAIGame(create_rng("py_random", 9))
    old = game.session
    game.player_pick(old.boards[PLAYER][3])
    game.end_game()
    assert old.outcome == "abandoned"
    assert game.session is not old
    assert game.session.history == []
    assert game.is_player_turn
    assert set(game.session.boards) == {PLAYER, AI}
