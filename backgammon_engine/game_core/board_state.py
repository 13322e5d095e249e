# backgammon_engine/game_core/board_state.py

from . import constants as c
from .exceptions import InvalidBoardError, IllegalMoveError


def create_initial_board_state():
    """
    Создает доску, используя константы правил.
    """
    board = [0] * c.BOARD_SIZE  # 0-27

    # Белые (1)
    for pos, count in c.STANDARD_WHITE_SETUP.items():
        board[int(pos)] = count * c.PLAYER_WHITE
    # Черные (-1)
    for pos, count in c.STANDARD_BLACK_SETUP.items():
        board[int(pos)] = count * c.PLAYER_BLACK
    return board


def build_board(white_points, black_points, white_bar=0, black_bar=0):
    """
    Собирает произвольную позицию (для тестов и разборов).

    white_points / black_points: {пункт: количество}, количества положительные.
    Все шашки, которых нет на доске и на баре, считаются выброшенными,
    так что у каждого игрока всегда ровно 15 шашек.
    """
    board = [0] * c.BOARD_SIZE

    for sign, points, bar_count in (
        (c.PLAYER_WHITE, white_points, white_bar),
        (c.PLAYER_BLACK, black_points, black_bar),
    ):
        on_board = 0
        for pos, count in points.items():
            pos = int(pos)
            if not c.POINT_1 <= pos <= c.POINT_24:
                raise InvalidBoardError(f"Point {pos} is outside 1..24")
            if count < 0:
                raise InvalidBoardError(f"Negative checker count on point {pos}")
            if count == 0:
                continue
            if board[pos] * sign < 0:
                raise InvalidBoardError(f"Point {pos} is occupied by both players")
            board[pos] = count * sign
            on_board += count

        if bar_count < 0:
            raise InvalidBoardError("Negative bar count")
        off_count = c.CHECKERS_PER_PLAYER - on_board - bar_count
        if off_count < 0:
            raise InvalidBoardError(
                f"{c.PLAYER_NAMES[sign]} has more than {c.CHECKERS_PER_PLAYER} checkers"
            )
        board[get_bar_pos(sign)] = bar_count * sign
        board[get_home_pos(sign)] = off_count * sign

    return board


def validate_board(board):
    """
    Проверяет инварианты доски. Бросает InvalidBoardError.
    """
    if len(board) != c.BOARD_SIZE:
        raise InvalidBoardError(f"Board must have {c.BOARD_SIZE} slots, got {len(board)}")

    for sign in (c.PLAYER_WHITE, c.PLAYER_BLACK):
        # Бар и дом хранятся со знаком владельца
        if board[get_bar_pos(sign)] * sign < 0 or board[get_home_pos(sign)] * sign < 0:
            raise InvalidBoardError(f"Bar/off slot of {c.PLAYER_NAMES[sign]} has a wrong sign")
        total = count_checkers(board, sign)
        if total != c.CHECKERS_PER_PLAYER:
            raise InvalidBoardError(
                f"{c.PLAYER_NAMES[sign]} has {total} checkers, expected {c.CHECKERS_PER_PLAYER}"
            )


def check_step(board, step, player_sign):
    """
    Проверяет геометрию одного шага (from, to, die) на доске.
    Бросает IllegalMoveError. Порядок кубиков и правило максимума
    здесь не проверяются, это дело move_generator.
    """
    fr, to, die = step['from'], step['to'], step['die']
    player_bar = get_bar_pos(player_sign)
    bear_off_pos = get_home_pos(player_sign)

    if not c.DIE_MIN <= die <= c.DIE_MAX:
        raise IllegalMoveError(f"Die value {die} is outside {c.DIE_MIN}..{c.DIE_MAX}")

    # 1. Откуда
    if fr != player_bar and not c.POINT_1 <= fr <= c.POINT_24:
        raise IllegalMoveError(f"Step cannot start at index {fr}")
    if board[fr] * player_sign <= 0:
        raise IllegalMoveError(f"No {c.PLAYER_NAMES[player_sign]} checker at index {fr}")
    if fr != player_bar and get_bar_count(board, player_sign) > 0:
        raise IllegalMoveError("Checkers on the bar must enter first")

    # 2. Куда
    if fr == player_bar:
        expected = c.BAR_WHITE - die if player_sign == c.PLAYER_WHITE else die
    else:
        expected = fr - die * player_sign

    if c.POINT_1 <= expected <= c.POINT_24:
        if to != expected:
            raise IllegalMoveError(f"Die {die} moves from {fr} to {expected}, not {to}")
        if is_point_blocked(board, to, player_sign):
            raise IllegalMoveError(f"Point {to} is blocked")
        return

    # 3. Выброс
    if to != bear_off_pos:
        raise IllegalMoveError(f"Die {die} from {fr} can only bear off")
    if not is_all_home(board, player_sign):
        raise IllegalMoveError("Cannot bear off before all checkers are home")

    distance = fr if player_sign == c.PLAYER_WHITE else (c.POINT_24 + 1 - fr)
    if die > distance and any(
        board[i] * player_sign > 0
        for i in get_home_board_range(player_sign)
        if (i - fr) * player_sign > 0
    ):
        raise IllegalMoveError(f"Die {die} bears off only from the furthest point")


def apply_move_to_board(board, move, player_sign):
    """
    Применяет ОДИН ход (from, to) к копии доски и возвращает ее.
    Исходная доска не изменяется. Ход не проверяется: сюда попадают
    только шаги из get_single_moves или прошедшие check_step.
    """

    new_board = list(board)
    fr, to = move['from'], move['to']

    new_board[fr] -= player_sign

    if c.POINT_1 <= to <= c.POINT_24:

        if new_board[to] * player_sign == -1:
            # Блот соперника уходит на его бар
            opponent_bar = get_bar_pos(-player_sign)
            new_board[opponent_bar] -= player_sign
            new_board[to] = 0
            new_board[to] += player_sign

        elif new_board[to] * player_sign >= 0:
            new_board[to] += player_sign

    elif to == c.HOME_WHITE or to == c.HOME_BLACK:
        new_board[to] += player_sign

    return new_board


def apply_step(board, step, player_sign):
    """
    Применяет шаг и описывает, что произошло: (new_board, outcome).

    outcome: {'moved': True, 'hit': bool, 'hit_point': int | None, 'borne_off': bool}
    Нелегальный шаг: IllegalMoveError, доска не меняется.
    """
    check_step(board, step, player_sign)

    to = step['to']
    was_blot = c.POINT_1 <= to <= c.POINT_24 and board[to] * player_sign == -1
    borne_off = to == get_home_pos(player_sign)

    new_board = apply_move_to_board(board, step, player_sign)
    outcome = {
        'moved': True,
        'hit': was_blot,
        'hit_point': to if was_blot else None,
        'borne_off': borne_off,
    }
    return new_board, outcome


def undo_move_on_board(board, last_move_data, player_sign):
    """
    Отменяет ход на доске. last_move_data: запись истории хода
    ({'step': ..., 'was_blot': ...}).
    """
    step = last_move_data['step']
    was_blot = last_move_data['was_blot']
    new_board = list(board)

    fr, to = step['from'], step['to']

    if c.POINT_1 <= to <= c.POINT_24:
        new_board[to] -= player_sign
    elif to == get_home_pos(player_sign):
        new_board[to] -= player_sign

    if was_blot:
        # Возвращаем шашку соперника с бара на пункт
        opponent_bar = get_bar_pos(-player_sign)
        new_board[opponent_bar] += player_sign
        new_board[to] -= player_sign

    new_board[fr] += player_sign

    return new_board


# --- Запросы ---

def get_bar_pos(player_sign):
    """Возвращает индекс бара для игрока."""
    return c.BAR_WHITE if player_sign == c.PLAYER_WHITE else c.BAR_BLACK


def get_home_pos(player_sign):
    """Возвращает индекс дома (bear off) для игрока."""
    return c.HOME_WHITE if player_sign == c.PLAYER_WHITE else c.HOME_BLACK


def get_home_board_range(player_sign):
    """Возвращает диапазон очков 'дома' на доске."""
    return c.HOME_BOARD_WHITE if player_sign == c.PLAYER_WHITE else c.HOME_BOARD_BLACK


def get_outer_board_range(player_sign):
    """Возвращает диапазон 'внешней' доски (для проверки is_all_home)."""
    return c.OUTER_BOARD_WHITE if player_sign == c.PLAYER_WHITE else c.OUTER_BOARD_BLACK


def get_bar_count(board, player_sign):
    return board[get_bar_pos(player_sign)] * player_sign


def get_off_count(board, player_sign):
    return board[get_home_pos(player_sign)] * player_sign


def get_point_owner(board, point):
    """1, -1 или 0 для пустого пункта."""
    if board[point] > 0:
        return c.PLAYER_WHITE
    if board[point] < 0:
        return c.PLAYER_BLACK
    return 0


def is_point_blocked(board, point, player_sign):
    """Пункт закрыт для игрока, если на нем 2+ шашки соперника."""
    return board[point] * player_sign <= -2


def count_checkers(board, player_sign):
    """Все шашки игрока: пункты + бар + дом."""
    on_points = sum(
        board[i] * player_sign
        for i in range(c.POINT_1, c.POINT_24 + 1)
        if board[i] * player_sign > 0
    )
    return on_points + get_bar_count(board, player_sign) + get_off_count(board, player_sign)


def is_all_home(board, player_sign):
    """Все шашки игрока в его доме (или уже выброшены), бар пуст."""
    if get_bar_count(board, player_sign) > 0:
        return False
    return all(board[i] * player_sign <= 0 for i in get_outer_board_range(player_sign))


# --- Публичные обозначения позиций ---

def to_public_location(index, player_sign):
    """Внутренний индекс -> 1..24 | 'bar' | 'off'."""
    if c.POINT_1 <= index <= c.POINT_24:
        return index
    if index == get_bar_pos(player_sign):
        return c.LOCATION_BAR
    if index == get_home_pos(player_sign):
        return c.LOCATION_OFF
    raise ValueError(f"Index {index} does not belong to player {player_sign}")


def from_public_location(value, player_sign):
    """1..24 | 'bar' | 'off' -> внутренний индекс."""
    if value == c.LOCATION_BAR:
        return get_bar_pos(player_sign)
    if value == c.LOCATION_OFF:
        return get_home_pos(player_sign)
    return int(value)


def to_public_step(step, player_sign):
    return {
        'from': to_public_location(step['from'], player_sign),
        'to': to_public_location(step['to'], player_sign),
        'die': step['die'],
    }
