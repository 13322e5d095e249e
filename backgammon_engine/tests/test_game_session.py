"""
Tests for the Game facade and the turn state machine.

Tests:
- Command/state validation
- End-to-end scenarios: opening, hit and re-entry, bear-off win
- Undo, manual end of turn, opening roll-off
- Event log and listeners
"""

import logging
import random

import pytest

from ..game_core import (
    PLAYER_WHITE,
    PLAYER_BLACK,
    InvalidStateError,
    IllegalMoveError,
    build_board,
    create_initial_board_state,
)
from ..game_core.board_state import count_checkers
from ..services import (
    Game,
    STATE_CREATED,
    STATE_AWAITING_ROLL,
    STATE_SELECTING_MOVES,
    STATE_TURN_COMPLETE,
    STATE_GAME_OVER,
)


def event_names(notifications):
    return [n['event'] for n in notifications]


def payload_of(notifications, event):
    return next(n['payload'] for n in notifications if n['event'] == event)


CLOSED_BOARD = {19: 2, 20: 2, 21: 2, 22: 2, 23: 2, 24: 2}


class TestStateValidation:
    """Commands are refused in states that forbid them."""

    def test_commands_before_start_fail(self, make_game):
        game = make_game(start=False)
        assert game.turn_state == STATE_CREATED

        with pytest.raises(InvalidStateError):
            game.roll_dice()
        with pytest.raises(InvalidStateError):
            game.propose_move(24, 18)

    def test_start_twice_fails(self, make_game):
        game = make_game()

        with pytest.raises(InvalidStateError):
            game.start_game()

    def test_move_before_roll_fails(self, make_game):
        game = make_game()
        assert game.turn_state == STATE_AWAITING_ROLL

        with pytest.raises(InvalidStateError):
            game.propose_move(24, 18)

    def test_legal_moves_before_roll_fails(self, make_game):
        game = make_game()

        with pytest.raises(InvalidStateError):
            game.legal_moves()

    def test_roll_twice_fails(self, make_game):
        game = make_game(rolls=[(6, 5), (3, 1)])
        game.roll_dice()

        with pytest.raises(InvalidStateError):
            game.roll_dice()
        assert game.dice == [6, 5]

    def test_out_of_turn_fails(self, make_game):
        game = make_game(rolls=[(6, 5)])

        with pytest.raises(InvalidStateError):
            game.roll_dice(player=PLAYER_BLACK)

        game.roll_dice(player=PLAYER_WHITE)
        with pytest.raises(InvalidStateError):
            game.legal_moves(player=PLAYER_BLACK)
        with pytest.raises(InvalidStateError):
            game.propose_move(1, 7, player=PLAYER_BLACK)

    def test_end_turn_with_moves_left_fails(self, make_game):
        game = make_game(rolls=[(6, 5)])
        game.roll_dice()

        with pytest.raises(InvalidStateError):
            game.end_turn()
        assert game.turn_state == STATE_SELECTING_MOVES

    def test_bad_die_from_source_leaves_state(self, make_game):
        game = make_game(rolls=[(7, 2)])

        with pytest.raises(ValueError):
            game.roll_dice()

        assert game.turn_state == STATE_AWAITING_ROLL
        assert game.dice == []

    def test_rejected_command_is_logged(self, make_game, caplog):
        game = make_game()
        caplog.set_level(logging.INFO, logger='backgammon_engine.events')

        with pytest.raises(InvalidStateError):
            game.propose_move(24, 18)

        assert "STATE_VIOLATION_BLOCKED" in caplog.text


class TestIllegalMoves:
    """Illegal proposals raise and leave the game untouched."""

    def test_illegal_move_leaves_state(self, make_game):
        game = make_game(rolls=[(6, 5)])
        game.roll_dice()
        board_before = game.board

        with pytest.raises(IllegalMoveError):
            game.propose_move(24, 19)  # 19 is black's 5-point

        assert game.board == board_before
        assert game.remaining_dice == [6, 5]
        assert game.history == []

    def test_malformed_location(self, make_game):
        game = make_game(rolls=[(6, 5)])
        game.roll_dice()

        with pytest.raises(IllegalMoveError):
            game.propose_move('nowhere', 18)
        with pytest.raises(IllegalMoveError):
            game.propose_move(24, 'bar')

    def test_wrong_ordering_refused(self, make_game):
        """Only 6-then-3 uses both dice, so playing the 3 first is refused."""
        board = build_board({10: 1}, {7: 2})
        game = make_game(rolls=[(3, 6)], board=board)
        game.roll_dice()

        assert game.legal_moves() == [{'from': 10, 'to': 4}]
        with pytest.raises(IllegalMoveError):
            game.propose_move(10, 7)

        game.propose_move(10, 4)
        assert game.legal_moves() == [{'from': 4, 'to': 1}]
        notifications = game.propose_move(4, 1)

        assert payload_of(notifications, 'turn_ended')['moves_played'] == 2


class TestOpeningScenario:
    """White opens with 6-5 and runs a back checker."""

    def test_opening_six_five(self, make_game):
        game = make_game(rolls=[(6, 5)])

        rolled = game.roll_dice()
        assert event_names(rolled) == ['dice_rolled']
        assert payload_of(rolled, 'dice_rolled')['dice'] == [6, 5]
        assert game.turn_state == STATE_SELECTING_MOVES
        assert {'from': 24, 'to': 18} in game.legal_moves()

        first = game.propose_move(24, 18)
        assert event_names(first) == ['move_applied']
        assert game.remaining_dice == [5]

        second = game.propose_move(18, 13)
        assert event_names(second) == ['move_applied', 'turn_ended']
        assert payload_of(second, 'turn_ended') == {
            'player': PLAYER_WHITE,
            'next_player': PLAYER_BLACK,
            'moves_played': 2,
        }

        assert game.turn_state == STATE_AWAITING_ROLL
        assert game.current_player == PLAYER_BLACK
        assert game.board[24] == 1 and game.board[13] == 6

    def test_manual_end_turn(self, make_game):
        """With AUTO_END_TURN off the turn waits in TURN_COMPLETE for end_turn()."""
        game = make_game(rolls=[(6, 5)], AUTO_END_TURN=False)
        game.roll_dice()
        game.propose_move(24, 18)
        notifications = game.propose_move(18, 13)

        assert event_names(notifications) == ['move_applied']
        assert game.turn_state == STATE_TURN_COMPLETE
        assert game.legal_moves() == []

        ended = game.end_turn()
        assert event_names(ended) == ['turn_ended']
        assert game.current_player == PLAYER_BLACK
        assert game.turn_state == STATE_AWAITING_ROLL

    def test_doubles_roll(self, make_game):
        game = make_game(rolls=[(3, 3)])

        notifications = game.roll_dice()

        assert payload_of(notifications, 'dice_rolled')['moves'] == [3, 3, 3, 3]
        assert game.remaining_dice == [3, 3, 3, 3]


class TestHitScenario:
    """A hit sends the blot to the bar and restricts the opponent to entry."""

    def test_hit_then_bar_entry_only(self, make_game):
        board = build_board({12: 1, 6: 14}, {9: 1, 24: 14})
        game = make_game(rolls=[(3, 1), (4, 2)], board=board)
        game.roll_dice()

        hit = game.propose_move(12, 9)
        assert event_names(hit) == ['move_applied', 'checker_hit']
        assert payload_of(hit, 'checker_hit') == {'point': 9, 'player': PLAYER_BLACK}
        assert game.snapshot()['bar'] == {'white': 0, 'black': 1}
        assert game.history[0]['hit'] is True

        game.propose_move(6, 5)
        assert game.current_player == PLAYER_BLACK

        game.roll_dice()
        moves = game.legal_moves()
        assert moves
        assert all(move['from'] == 'bar' for move in moves)

        entered = game.propose_move('bar', 4)
        assert payload_of(entered, 'move_applied')['from'] == 'bar'
        assert game.snapshot()['bar']['black'] == 0


class TestNoMoves:
    """A roll with no legal play forfeits the turn."""

    def test_roll_without_moves_passes_turn(self, make_game):
        board = build_board({6: 14}, CLOSED_BOARD, white_bar=1)
        game = make_game(rolls=[(3, 5)], board=board)

        notifications = game.roll_dice()

        assert event_names(notifications) == ['dice_rolled', 'turn_ended']
        assert payload_of(notifications, 'turn_ended')['moves_played'] == 0
        assert game.current_player == PLAYER_BLACK
        assert game.turn_state == STATE_AWAITING_ROLL

    def test_roll_without_moves_manual_end(self, make_game):
        board = build_board({6: 14}, CLOSED_BOARD, white_bar=1)
        game = make_game(rolls=[(3, 5)], board=board, AUTO_END_TURN=False)

        game.roll_dice()

        assert game.turn_state == STATE_TURN_COMPLETE
        assert game.legal_turns() == []
        game.end_turn()
        assert game.current_player == PLAYER_BLACK


class TestWinScenario:
    """Bearing off the 15th checker ends the game."""

    def make_final_position(self, make_game, **overrides):
        board = build_board({1: 1}, {24: 2})
        return make_game(rolls=[(2, 1)], board=board, **overrides)

    def test_bear_off_last_checker_wins(self, make_game):
        game = self.make_final_position(make_game)
        game.roll_dice()

        notifications = game.propose_move(1, 'off')

        assert event_names(notifications) == ['move_applied', 'checker_borne_off', 'game_won']
        assert payload_of(notifications, 'game_won') == {'player': PLAYER_WHITE}
        assert game.turn_state == STATE_GAME_OVER
        assert game.winner == PLAYER_WHITE
        assert game.is_over
        assert game.snapshot()['off']['white'] == 15

    def test_game_over_refuses_commands(self, make_game):
        game = self.make_final_position(make_game, AUTO_END_TURN=False)
        game.roll_dice()
        game.propose_move(1, 'off')

        with pytest.raises(InvalidStateError):
            game.roll_dice()
        with pytest.raises(InvalidStateError):
            game.propose_move(24, 'off', player=PLAYER_BLACK)
        with pytest.raises(InvalidStateError):
            game.end_turn()
        with pytest.raises(InvalidStateError):
            game.undo_move()

    def test_reset_after_win(self, make_game):
        game = self.make_final_position(make_game)
        game.roll_dice()
        game.propose_move(1, 'off')

        notifications = game.reset_game()

        assert event_names(notifications) == ['game_reset']
        assert game.turn_state == STATE_CREATED
        assert game.winner is None
        assert game.board == build_board({1: 1}, {24: 2})

        started = game.start_game(PLAYER_BLACK)
        assert event_names(started) == ['game_started']
        assert game.current_player == PLAYER_BLACK


class TestUndo:
    """Undo within the current turn."""

    def test_undo_restores_board_and_die(self, make_game):
        game = make_game(rolls=[(6, 5)])
        game.roll_dice()
        game.propose_move(24, 18)

        notifications = game.undo_move()

        assert event_names(notifications) == ['move_undone']
        assert payload_of(notifications, 'move_undone')['from'] == 24
        assert game.board == create_initial_board_state()
        assert game.remaining_dice == [6, 5]
        assert game.history == []
        assert game.turn_state == STATE_SELECTING_MOVES

    def test_undo_hit_returns_blot(self, make_game):
        board = build_board({12: 1, 6: 14}, {9: 1, 24: 14})
        game = make_game(rolls=[(3, 1)], board=board)
        game.roll_dice()
        game.propose_move(12, 9)

        game.undo_move()

        assert game.board == board

    def test_undo_from_turn_complete(self, make_game):
        game = make_game(rolls=[(6, 5)], AUTO_END_TURN=False)
        game.roll_dice()
        game.propose_move(24, 18)
        game.propose_move(18, 13)

        game.undo_move()

        assert game.turn_state == STATE_SELECTING_MOVES
        assert game.remaining_dice == [5]

    def test_undo_without_history_fails(self, make_game):
        game = make_game(rolls=[(6, 5)])
        game.roll_dice()

        with pytest.raises(InvalidStateError):
            game.undo_move()

    def test_undo_disabled(self, make_game):
        game = make_game(rolls=[(6, 5)], ALLOW_UNDO=False)
        game.roll_dice()
        game.propose_move(24, 18)

        with pytest.raises(InvalidStateError):
            game.undo_move()


class TestOpeningRollOff:
    """Standard opening: each side rolls one die, the higher one starts."""

    def test_roll_off_with_tie(self, make_game):
        game = make_game(rolls=[(4, 4), (2, 5)], start=False, OPENING_ROLL_OFF=True)

        notifications = game.start_game()

        assert event_names(notifications) == ['game_started', 'dice_rolled']
        assert payload_of(notifications, 'game_started')['first_player'] == PLAYER_BLACK
        assert game.current_player == PLAYER_BLACK
        assert game.turn_state == STATE_SELECTING_MOVES
        assert game.dice == [2, 5]

    def test_bad_roll_off_die_leaves_game_unstarted(self, make_game, events):
        game = make_game(rolls=[(7, 2)], start=False, OPENING_ROLL_OFF=True)
        game.subscribe(events)

        with pytest.raises(ValueError):
            game.start_game()

        assert game.turn_state == STATE_CREATED
        assert game.current_player is None
        assert events.recorded == []

    def test_explicit_first_player_skips_roll_off(self, make_game):
        game = make_game(start=False, OPENING_ROLL_OFF=True)

        game.start_game(PLAYER_WHITE)

        assert game.turn_state == STATE_AWAITING_ROLL


class TestListeners:
    """Listeners receive every notification once, in order."""

    def test_listener_receives_events(self, make_game, events):
        game = make_game(rolls=[(6, 5)], start=False)
        game.subscribe(events)

        game.start_game()
        game.roll_dice()
        game.propose_move(24, 18)
        game.propose_move(18, 13)

        assert [name for name, _ in events.recorded] == [
            'game_started', 'dice_rolled', 'move_applied', 'move_applied', 'turn_ended',
        ]

    def test_failing_listener_does_not_break_game(self, make_game, events):
        game = make_game(rolls=[(6, 5)])

        def broken(notification):
            raise RuntimeError("boom")

        game.subscribe(broken)
        game.subscribe(events)
        game.roll_dice()

        assert [name for name, _ in events.recorded] == ['dice_rolled']
        assert game.turn_state == STATE_SELECTING_MOVES

    def test_unsubscribe(self, make_game, events):
        game = make_game(rolls=[(6, 5)])
        game.subscribe(events)
        game.unsubscribe(events)

        game.roll_dice()

        assert events.recorded == []


class TestSeparateGames:
    """Games share no state."""

    def test_games_are_independent(self, make_game):
        first = make_game(rolls=[(6, 5)])
        second = make_game(rolls=[(6, 5)])

        first.roll_dice()
        first.propose_move(24, 18)

        assert second.board == create_initial_board_state()
        assert second.turn_state == STATE_AWAITING_ROLL

    def test_bad_board_rejected(self):
        board = create_initial_board_state()
        board[6] = 4

        with pytest.raises(ValueError):
            Game(board=board)


class TestRandomPlayout:
    """Random games keep every checker accounted for and end with a winner."""

    MAX_COMMANDS = 5000
    SIDES = {PLAYER_WHITE: 'white', PLAYER_BLACK: 'black'}

    @pytest.mark.parametrize("seed", [1, 7, 42, 2024])
    def test_random_game_invariants(self, seed):
        chooser = random.Random(seed)
        game = Game(game_id=f"playout_{seed}", rng=random.Random(seed))
        game.start_game()

        for _ in range(self.MAX_COMMANDS):
            if game.is_over:
                break
            if game.turn_state == STATE_AWAITING_ROLL:
                game.roll_dice()
                continue

            move = chooser.choice(game.legal_moves())
            bar_before = game.snapshot()['bar']
            notifications = game.propose_move(move['from'], move['to'])

            if 'checker_hit' in event_names(notifications):
                victim = self.SIDES[payload_of(notifications, 'checker_hit')['player']]
                assert game.snapshot()['bar'][victim] == bar_before[victim] + 1

            board = game.board
            assert count_checkers(board, PLAYER_WHITE) == 15
            assert count_checkers(board, PLAYER_BLACK) == 15

        assert game.is_over
        assert game.snapshot()['off'][self.SIDES[game.winner]] == 15
