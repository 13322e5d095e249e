# backgammon_engine/game_core/utils.py

import random
from . import constants as c
from . import board_state as board


def roll_dice(rng=None):
    """Бросает два кубика. rng: random.Random для воспроизводимых бросков."""
    source = rng or random
    return (source.randint(c.DIE_MIN, c.DIE_MAX), source.randint(c.DIE_MIN, c.DIE_MAX))


def is_doubles(d1, d2):
    return d1 == d2


def get_move_values(d1, d2):
    """Дубль дает четыре хода, иначе два."""
    for die in (d1, d2):
        if not c.DIE_MIN <= die <= c.DIE_MAX:
            raise ValueError(f"Die value {die} is outside {c.DIE_MIN}..{c.DIE_MAX}")
    if is_doubles(d1, d2):
        return [d1] * c.MAX_MOVES_PER_TURN
    return [d1, d2]


def has_won(board_state, player_sign):
    return board.get_off_count(board_state, player_sign) == c.WINNING_SCORE


def get_winner(board_state):
    """Возвращает 1, -1 или 0 (нет победителя)."""
    if has_won(board_state, c.PLAYER_WHITE):
        return c.PLAYER_WHITE
    if has_won(board_state, c.PLAYER_BLACK):
        return c.PLAYER_BLACK
    return 0


def are_moves_available(possible_turns):
    """Проверяет, есть ли хотя бы один ход в списке."""
    return any(possible_turns)
