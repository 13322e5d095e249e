# backgammon_engine/services/game_session.py

import uuid
import logging
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence

from backgammon_engine.api.schemas import GameSnapshotSchema
from backgammon_engine.config import get_config
from backgammon_engine.globals import log_event as default_log_event
from backgammon_engine.game_core import (
    create_initial_board_state,
    validate_board,
    get_legal_first_steps,
    roll_dice,
    get_move_values,
    InvalidStateError,
    PLAYER_WHITE,
    PLAYER_BLACK,
)
from backgammon_engine.game_core.board_state import (
    get_bar_count,
    get_off_count,
    to_public_location,
    to_public_step,
)
from backgammon_engine.game_core.constants import POINT_1, POINT_24, PLAYER_NAMES

from .game_state import (
    GameState,
    STATE_CREATED,
    STATE_SELECTING_MOVES,
    STATE_TURN_COMPLETE,
    STATE_GAME_OVER,
)
from .game_turn_manager import GameTurnManager

logger = logging.getLogger(__name__)

DiceSource = Callable[[], Sequence[int]]


class Game:
    """
    Представляет ОДНУ партию.
    Является "Фасадом": принимает команды слоя представления,
    делегирует правила хода GameTurnManager, хранит GameState
    и рассылает уведомления подписчикам.

    Каждая команда возвращает список уведомлений, которые она породила,
    и передает их же всем подписчикам (subscribe).
    Объект не потокобезопасен: вызывающая сторона сериализует вызовы.
    """

    def __init__(
        self,
        game_id: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        log_event: Optional[Callable] = None,
        dice_source: Optional[DiceSource] = None,
        rng: Any = None,
        board: Optional[List[int]] = None,
        turn_manager: Optional[GameTurnManager] = None,
    ):
        self.id = game_id or str(uuid.uuid4())
        self.config = get_config() if config is None else config
        self.log_event = log_event or default_log_event
        self.dice_source: DiceSource = dice_source or partial(roll_dice, rng)

        try:
            self.first_player = self.config['FIRST_PLAYER']
            self.opening_roll_off = self.config['OPENING_ROLL_OFF']
        except KeyError as e:
            raise KeyError(f"Game ({self.id}): отсутствует ключ конфига {e} при внедрении.")

        # Стартовая позиция: стандартная или заданная (для разборов и тестов)
        if board is not None:
            validate_board(board)
            self._initial_board = list(board)
        else:
            self._initial_board = create_initial_board_state()

        self.state = GameState(self._initial_board)
        self.turn_manager = turn_manager or GameTurnManager(
            game_id=self.id,
            config=self.config,
            log_event=self.log_event,
        )
        self._listeners: List[Callable[[Dict[str, Any]], None]] = []

        self.log_event("SESSION_INIT", "Game instance created.", game_id=self.id)

    # --- Подписчики ---

    def subscribe(self, listener: Callable[[Dict[str, Any]], None]):
        """listener(notification) вызывается для каждого уведомления по порядку."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[Dict[str, Any]], None]):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _dispatch(self, notifications: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        for notification in notifications:
            for listener in list(self._listeners):
                try:
                    listener(notification)
                except Exception as e:
                    # Ошибка подписчика не должна ломать партию и других подписчиков
                    logger.error(
                        f"[Game {self.id}] Listener failed on '{notification['event']}': {e}",
                        exc_info=True,
                    )
        return notifications

    # --- Команды ---

    def start_game(self, first_player: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Начинает партию со стартовой позиции.

        Кто ходит первым: first_player, иначе розыгрыш по кубику
        (OPENING_ROLL_OFF), иначе FIRST_PLAYER из конфига.
        При розыгрыше победитель сразу играет выпавшие кубики.
        """
        if self.state.session_state != STATE_CREATED:
            self.log_event(
                "STATE_VIOLATION_BLOCKED",
                f"Tried to start game in state '{self.state.session_state}'.",
                game_id=self.id,
            )
            raise InvalidStateError(f"Cannot start game in state {self.state.session_state}")

        if first_player is not None and first_player not in (PLAYER_WHITE, PLAYER_BLACK):
            raise ValueError(f"Unknown player: {first_player!r}")

        opening_dice = None
        if first_player is None and self.opening_roll_off:
            first_player, opening_dice = self._roll_off()
            # Проверяем кубики до изменения состояния
            get_move_values(*opening_dice)
        elif first_player is None:
            first_player = self.first_player

        self.state = GameState(self._initial_board)
        self.turn_manager.start_turn(self.state, first_player)

        self.log_event(
            "GAME_STARTED",
            f"First player: {PLAYER_NAMES[first_player]}.",
            game_id=self.id,
        )
        notifications = [self._notify('game_started', {
            'first_player': first_player,
            'board': self.board,
        })]

        if opening_dice is not None:
            notifications.extend(
                self.turn_manager.roll_dice_for_player(self.state, first_player, lambda: opening_dice)
            )

        return self._dispatch(notifications)

    def roll_dice(self, player: Optional[int] = None) -> List[Dict[str, Any]]:
        player_sign = self._resolve_player(player, 'roll dice')
        notifications = self.turn_manager.roll_dice_for_player(self.state, player_sign, self.dice_source)
        return self._dispatch(notifications)

    def propose_move(self, origin: Any, destination: Any, player: Optional[int] = None) -> List[Dict[str, Any]]:
        """origin: 1..24 или 'bar'; destination: 1..24 или 'off'."""
        player_sign = self._resolve_player(player, 'move')
        notifications = self.turn_manager.apply_player_step(self.state, player_sign, origin, destination)
        return self._dispatch(notifications)

    def undo_move(self, player: Optional[int] = None) -> List[Dict[str, Any]]:
        player_sign = self._resolve_player(player, 'undo')
        notifications = self.turn_manager.undo_last_move(self.state, player_sign)
        return self._dispatch(notifications)

    def end_turn(self, player: Optional[int] = None) -> List[Dict[str, Any]]:
        player_sign = self._resolve_player(player, 'end turn')
        notifications = self.turn_manager.finalize_player_turn(self.state, player_sign)
        return self._dispatch(notifications)

    def reset_game(self) -> List[Dict[str, Any]]:
        """Возвращает партию в исходное состояние; нужен новый start_game()."""
        self.state = GameState(self._initial_board)
        self.log_event("GAME_RESET", "Game reset to the starting position.", game_id=self.id)
        return self._dispatch([self._notify('game_reset', {})])

    # --- Запросы ---

    @property
    def board(self) -> List[int]:
        return list(self.state.board)

    @property
    def current_player(self) -> Optional[int]:
        return self.state.turn or None

    @property
    def turn_state(self) -> str:
        return self.state.session_state

    @property
    def dice(self) -> List[int]:
        return list(self.state.rolled)

    @property
    def remaining_dice(self) -> List[int]:
        return list(self.state.dice)

    @property
    def winner(self) -> Optional[int]:
        return self.state.winner or None

    @property
    def is_over(self) -> bool:
        return self.state.session_state == STATE_GAME_OVER

    @property
    def history(self) -> List[Dict[str, Any]]:
        """Шаги текущего хода в публичном виде."""
        sign = self.state.turn
        history = []
        for entry in self.state.history:
            public = to_public_step(entry['step'], sign)
            public['hit'] = entry['was_blot']
            history.append(public)
        return history

    def legal_moves(self, player: Optional[int] = None) -> List[Dict[str, Any]]:
        """Шаги {'from', 'to'}, которые можно сыграть прямо сейчас."""
        player_sign = self._check_move_query(player)
        return [
            {
                'from': to_public_location(step['from'], player_sign),
                'to': to_public_location(step['to'], player_sign),
            }
            for step in get_legal_first_steps(self.state.possible_turns)
        ]

    def legal_turns(self, player: Optional[int] = None) -> List[List[Dict[str, Any]]]:
        """Все легальные полные последовательности для оставшихся кубиков."""
        player_sign = self._check_move_query(player)
        return [
            [to_public_step(step, player_sign) for step in sequence]
            for sequence in self.state.possible_turns
        ]

    def snapshot(self) -> Dict[str, Any]:
        board = self.state.board
        data = {
            'game_id': self.id,
            'state': self.state.session_state,
            'current_player': self.current_player,
            'winner': self.winner,
            'dice': self.dice,
            'remaining_dice': self.remaining_dice,
            'points': board[POINT_1:POINT_24 + 1],
            'bar': {
                'white': get_bar_count(board, PLAYER_WHITE),
                'black': get_bar_count(board, PLAYER_BLACK),
            },
            'off': {
                'white': get_off_count(board, PLAYER_WHITE),
                'black': get_off_count(board, PLAYER_BLACK),
            },
            'history': [
                {'origin': h['from'], 'destination': h['to'], 'die': h['die'], 'hit': h['hit']}
                for h in self.history
            ],
        }
        return GameSnapshotSchema().dump(data)

    # --- Внутренние ---

    def _roll_off(self):
        """Каждый бросает по кубику, ничья перебрасывается."""
        while True:
            white_die, black_die = self.dice_source()
            if white_die != black_die:
                break
            self.log_event(
                "GAME_LOGIC",
                f"Opening roll tie ({white_die}), re-rolling.",
                game_id=self.id,
            )
        first_player = PLAYER_WHITE if white_die > black_die else PLAYER_BLACK
        return first_player, (white_die, black_die)

    def _resolve_player(self, player: Optional[int], action: str) -> int:
        if self.state.session_state in (STATE_CREATED, STATE_GAME_OVER):
            self.log_event(
                "STATE_VIOLATION_BLOCKED",
                f"Tried to {action} in state '{self.state.session_state}'.",
                game_id=self.id,
                player=player,
            )
            raise InvalidStateError(f"Cannot {action} in state {self.state.session_state}")
        return self.state.turn if player is None else player

    def _check_move_query(self, player: Optional[int]) -> int:
        if self.state.session_state not in (STATE_SELECTING_MOVES, STATE_TURN_COMPLETE):
            raise InvalidStateError(
                f"Legal moves are only known after a roll (state {self.state.session_state})"
            )
        player_sign = self.state.turn if player is None else player
        if player_sign != self.state.turn:
            raise InvalidStateError(f"It is not {PLAYER_NAMES.get(player_sign, player_sign)}'s turn")
        return player_sign

    def _notify(self, event: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {'event': event, 'payload': payload, 'game_id': self.id}
