# backgammon_engine/services/game_state.py

from typing import List, Dict, Any, Optional
from backgammon_engine.game_core import create_initial_board_state

# Партия создана, но еще не начата (или сброшена).
STATE_CREATED = "CREATED"
# Игрок должен бросить кубики.
STATE_AWAITING_ROLL = "AWAITING_ROLL"
# Кратковременное состояние внутри roll_dice: кубики брошены, ходы считаются.
STATE_ROLL_IN_PROGRESS = "ROLL_IN_PROGRESS"
# Игрок выбирает ходы для оставшихся кубиков.
STATE_SELECTING_MOVES = "SELECTING_MOVES"
# Ходов не осталось, ждем передачи хода.
STATE_TURN_COMPLETE = "TURN_COMPLETE"
# Терминальное состояние до reset_game().
STATE_GAME_OVER = "GAME_OVER"


class GameState:
    """
    Простой класс-хранилище (DTO) для всего состояния
    конкретной партии. Не содержит логики.
    """
    def __init__(self, board: Optional[List[int]] = None):
        self.board: List[int] = list(board) if board is not None else create_initial_board_state()
        self.rolled: List[int] = []  # Брошенные кубики (d1, d2)
        self.dice: List[int] = []  # Оставшиеся значения кубиков
        self.history: List[Dict[str, Any]] = []  # Шаги текущего хода
        self.turn: int = 0  # 0 = никто, 1 = белые, -1 = черные
        self.possible_turns: List[List[Dict[str, int]]] = []
        self.winner: int = 0
        self.session_state: str = STATE_CREATED

    def clear_turn(self):
        """Сбрасывает данные текущего хода."""
        self.rolled, self.dice, self.history, self.possible_turns = [], [], [], []
