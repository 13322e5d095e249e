# backgammon_engine/services/game_turn_manager.py

import logging
from typing import TYPE_CHECKING, Dict, Any, Callable, List, Optional, Sequence

from marshmallow import ValidationError

from backgammon_engine.api.schemas import MoveCommandSchema
from backgammon_engine.game_core import (
    get_all_possible_turns,
    apply_step,
    get_move_values,
    is_doubles,
    get_move_details,
    undo_move_on_board,
    has_won,
    are_moves_available,
    InvalidStateError,
    IllegalMoveError,
)
from backgammon_engine.game_core.board_state import (
    from_public_location,
    to_public_step,
)
from backgammon_engine.game_core.constants import PLAYER_NAMES

from .game_state import (
    STATE_AWAITING_ROLL,
    STATE_ROLL_IN_PROGRESS,
    STATE_SELECTING_MOVES,
    STATE_TURN_COMPLETE,
    STATE_GAME_OVER,
)

if TYPE_CHECKING:
    from .game_state import GameState

logger = logging.getLogger(__name__)


class GameTurnManager:
    """
    Управляет логикой одного хода: бросок, применение шага,
    отмена, завершение хода и проверка победы.

    Каждый метод сначала все рассчитывает и только потом меняет
    game_state, так что отклоненная команда состояние не трогает.
    Возвращает список уведомлений {'event', 'payload', 'game_id'}.
    """
    def __init__(
        self,
        game_id: str,

        # --- Зависимости, внедренные фабрикой ---
        config: Dict[str, Any],
        log_event: Callable,
    ):
        self.game_id = game_id
        self.log_event = log_event
        self.move_schema = MoveCommandSchema()

        # --- Извлекаем нужные ключи из внедренного конфига ---
        try:
            self.config = {
                'AUTO_END_TURN': config['AUTO_END_TURN'],
                'ALLOW_UNDO': config['ALLOW_UNDO'],
            }
        except KeyError as e:
            raise KeyError(f"GameTurnManager ({self.game_id}): отсутствует ключ конфига {e} при внедрении.")

    # --- Переходы состояний ---

    def start_turn(self, game_state: 'GameState', player_sign: int):
        """Передает ход игроку: он должен бросить кубики."""
        game_state.clear_turn()
        game_state.turn = player_sign
        self._set_state(game_state, STATE_AWAITING_ROLL)

    def roll_dice_for_player(self, game_state: 'GameState', player_sign: int, dice_source: Callable[[], Sequence[int]]) -> List[Dict]:
        """
        Обрабатывает бросок кубиков игроком.

        1. Проверяет, что действие легально (состояние, чей ход).
        2. Рассчитывает возможные ходы.
        3. Без ходов сразу завершает ход.
        """
        notifications = []

        # --- 1. Проверки-предохранители (Guard Clauses) ---
        self._require_state(game_state, (STATE_AWAITING_ROLL,), 'roll dice', player_sign)
        self._require_turn(game_state, player_sign, 'roll dice')

        # --- 2. Бросок и расчет ходов ---
        d1, d2 = dice_source()
        move_values = get_move_values(d1, d2)
        possible_turns = get_all_possible_turns(game_state.board, move_values, player_sign)

        # --- 3. Обновление состояния (Commit) ---
        game_state.rolled = [d1, d2]
        game_state.dice = move_values
        game_state.history = []
        game_state.possible_turns = possible_turns
        self._set_state(game_state, STATE_ROLL_IN_PROGRESS)

        notifications.append(self._notify('dice_rolled', {
            'player': player_sign,
            'dice': [d1, d2],
            'moves': list(move_values),
            'doubles': is_doubles(d1, d2),
        }))

        # --- 4. Обработка отсутствия ходов ---
        if not are_moves_available(possible_turns):
            self.log_event(
                "AUTO_TURN_FINISH",
                f"No legal moves with {move_values}, turn forfeited.",
                game_id=self.game_id,
                player=player_sign,
            )
            notifications.extend(self._complete_turn(game_state))
            return notifications

        self._set_state(game_state, STATE_SELECTING_MOVES)
        return notifications

    def apply_player_step(self, game_state: 'GameState', player_sign: int, origin: Any, destination: Any) -> List[Dict]:
        """
        Обрабатывает ОДИН ШАГ игрока (не весь ход).
        После шага сразу проверяется победа.
        """
        notifications = []

        # --- 1. Проверки-предохранители ---
        self._require_state(game_state, (STATE_SELECTING_MOVES,), 'move', player_sign)
        self._require_turn(game_state, player_sign, 'move')

        step = self._parse_step(origin, destination, player_sign)

        # --- 2. Фаза "Calculate" ---
        is_valid, die_used, was_blot = get_move_details(
            game_state.board, game_state.dice, player_sign, step, game_state.possible_turns
        )

        if not is_valid:
            self.log_event(
                "MOVE_REJECTED",
                f"Illegal move {origin} -> {destination} with dice {game_state.dice}.",
                game_id=self.game_id,
                player=player_sign,
            )
            raise IllegalMoveError(
                f"Move {origin} -> {destination} is not legal with dice {game_state.dice}"
            )

        step = {'from': step['from'], 'to': step['to'], 'die': die_used}
        new_board, outcome = apply_step(game_state.board, step, player_sign)

        temp_dice = list(game_state.dice)
        temp_dice.remove(die_used)

        new_possible_turns = []
        if temp_dice:
            new_possible_turns = get_all_possible_turns(new_board, temp_dice, player_sign)

        # --- 3. Фаза "Commit" ---
        game_state.board = new_board
        game_state.dice = temp_dice
        game_state.history.append({'step': step, 'die_used': die_used, 'was_blot': was_blot})
        game_state.possible_turns = new_possible_turns

        public_step = to_public_step(step, player_sign)
        notifications.append(self._notify('move_applied', {
            'player': player_sign,
            'from': public_step['from'],
            'to': public_step['to'],
            'die': die_used,
            'remaining_dice': list(temp_dice),
        }))
        if outcome['hit']:
            notifications.append(self._notify('checker_hit', {
                'point': outcome['hit_point'],
                'player': -player_sign,
            }))
        if outcome['borne_off']:
            notifications.append(self._notify('checker_borne_off', {
                'player': player_sign,
                'from': public_step['from'],
            }))

        # --- 4. Немедленная проверка победы ---
        if has_won(game_state.board, player_sign):
            notifications.extend(self._handle_victory(game_state, player_sign))
            return notifications

        if not are_moves_available(new_possible_turns):
            notifications.extend(self._complete_turn(game_state))

        return notifications

    def undo_last_move(self, game_state: 'GameState', player_sign: int) -> List[Dict]:
        if not self.config['ALLOW_UNDO']:
            raise InvalidStateError("Undo is disabled for this game")

        self._require_state(game_state, (STATE_SELECTING_MOVES, STATE_TURN_COMPLETE), 'undo', player_sign)
        self._require_turn(game_state, player_sign, 'undo')

        if not game_state.history:
            raise InvalidStateError("No moves to undo")

        last_move_data = game_state.history[-1]
        die_used = last_move_data['die_used']

        new_board = undo_move_on_board(game_state.board, last_move_data, player_sign)
        new_dice = sorted(game_state.dice + [die_used], reverse=True)
        new_possible_turns = get_all_possible_turns(new_board, new_dice, player_sign)

        game_state.history.pop()
        game_state.board = new_board
        game_state.dice = new_dice
        game_state.possible_turns = new_possible_turns
        self._set_state(game_state, STATE_SELECTING_MOVES)

        public_step = to_public_step(last_move_data['step'], player_sign)
        return [self._notify('move_undone', {
            'player': player_sign,
            'from': public_step['from'],
            'to': public_step['to'],
            'die': die_used,
            'remaining_dice': list(new_dice),
        })]

    def finalize_player_turn(self, game_state: 'GameState', player_sign: int) -> List[Dict]:
        self._require_state(game_state, (STATE_SELECTING_MOVES, STATE_TURN_COMPLETE), 'end turn', player_sign)
        self._require_turn(game_state, player_sign, 'end turn')

        if are_moves_available(game_state.possible_turns):
            self.log_event(
                "STATE_VIOLATION_BLOCKED",
                f"Tried to end turn with legal moves left for dice {game_state.dice}.",
                game_id=self.game_id,
                player=player_sign,
            )
            raise InvalidStateError("All legal moves must be played before ending the turn")

        return self._pass_turn(game_state)

    # --- Внутренние ---

    def _complete_turn(self, game_state: 'GameState') -> List[Dict]:
        self._set_state(game_state, STATE_TURN_COMPLETE)
        if self.config['AUTO_END_TURN']:
            return self._pass_turn(game_state)
        return []

    def _pass_turn(self, game_state: 'GameState') -> List[Dict]:
        player_sign = game_state.turn
        moves_played = len(game_state.history)
        next_player = -player_sign

        self.start_turn(game_state, next_player)
        self.log_event(
            "TURN_PASSED",
            f"{moves_played} move(s) played, turn passes to {PLAYER_NAMES[next_player]}.",
            game_id=self.game_id,
            player=player_sign,
        )
        return [self._notify('turn_ended', {
            'player': player_sign,
            'next_player': next_player,
            'moves_played': moves_played,
        })]

    def _handle_victory(self, game_state: 'GameState', winner_sign: int) -> List[Dict]:
        game_state.winner = winner_sign
        game_state.dice, game_state.possible_turns = [], []
        self._set_state(game_state, STATE_GAME_OVER)
        self.log_event("GAME_END_WIN", f"Winner: {PLAYER_NAMES[winner_sign]}", game_id=self.game_id)
        return [self._notify('game_won', {'player': winner_sign})]

    def _parse_step(self, origin: Any, destination: Any, player_sign: int) -> Dict[str, int]:
        """Публичные позиции (1..24, 'bar', 'off') -> внутренние индексы."""
        try:
            data = self.move_schema.load({'from': origin, 'to': destination})
        except ValidationError as err:
            raise IllegalMoveError(f"Malformed move {origin!r} -> {destination!r}: {err.messages}") from err
        return {
            'from': from_public_location(data['origin'], player_sign),
            'to': from_public_location(data['destination'], player_sign),
        }

    def _require_state(self, game_state: 'GameState', allowed: tuple, action: str, player_sign: Optional[int] = None):
        if game_state.session_state in allowed:
            return
        self.log_event(
            "STATE_VIOLATION_BLOCKED",
            f"Tried to {action} in state '{game_state.session_state}'. Expected one of {allowed}.",
            game_id=self.game_id,
            player=player_sign,
        )
        raise InvalidStateError(f"Cannot {action} in state {game_state.session_state}")

    def _require_turn(self, game_state: 'GameState', player_sign: int, action: str):
        if game_state.turn == player_sign:
            return
        self.log_event(
            "STATE_VIOLATION_BLOCKED",
            f"Tried to {action} out of turn.",
            game_id=self.game_id,
            player=player_sign,
        )
        raise InvalidStateError(f"It is not {PLAYER_NAMES.get(player_sign, player_sign)}'s turn")

    def _set_state(self, game_state: 'GameState', new_state: str):
        if game_state.session_state == new_state:
            return
        logger.debug("Game %s: %s -> %s", self.game_id, game_state.session_state, new_state)
        game_state.session_state = new_state

    def _notify(self, event: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {'event': event, 'payload': payload, 'game_id': self.game_id}
