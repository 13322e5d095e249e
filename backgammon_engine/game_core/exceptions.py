# backgammon_engine/game_core/exceptions.py


class BackgammonError(Exception):
    """Базовая ошибка движка."""


class InvalidStateError(BackgammonError):
    """Команда недопустима в текущем состоянии игры/хода."""


class IllegalMoveError(BackgammonError):
    """Предложенный ход не входит в множество легальных ходов."""


class InvalidBoardError(BackgammonError, ValueError):
    """Позиция нарушает инварианты доски (15 шашек, один владелец на пункте)."""
