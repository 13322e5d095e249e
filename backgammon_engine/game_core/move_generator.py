# backgammon_engine/game_core/move_generator.py

from . import constants as c
from . import board_state as board


def get_all_possible_turns(board_state, dice, player_sign):
    """
    Главная функция, которая находит ВСЕ легальные ПОЛНЫЕ последовательности ходов.

    Перебор идет по явному стеку (глубина не больше MAX_MOVES_PER_TURN),
    собираются все терминальные пути, затем применяются правила:
    сыграть максимум кубиков, при одном сыгранном кубике играется больший,
    одинаковые последовательности схлопываются.

    Каждая последовательность: список шагов {'from', 'to', 'die'}.
    """
    if len(dice) > c.MAX_MOVES_PER_TURN:
        raise ValueError(f"At most {c.MAX_MOVES_PER_TURN} dice per turn, got {len(dice)}")

    all_terminal_paths = []
    stack = [([], list(dice), board_state)]

    while stack:
        path, remaining_dice, current_board = stack.pop()

        possible_next_steps = []
        # Находим все возможные *следующие* одиночные ходы
        for die in sorted(set(remaining_dice), reverse=True):
            for move in get_single_moves(current_board, die, player_sign):
                possible_next_steps.append(move)

        if not possible_next_steps:
            # Терминальный узел: ходов с этой доски нет
            all_terminal_paths.append(path)
            continue

        for move in possible_next_steps:
            new_board = board.apply_move_to_board(current_board, move, player_sign)

            # Копируем список и удаляем *один* использованный кубик
            next_remaining_dice = list(remaining_dice)
            next_remaining_dice.remove(move['die'])

            stack.append((path + [move], next_remaining_dice, new_board))

    # --- Фильтрация результатов ---

    # 1. Правило "Сыграть максимум"
    max_len = max(len(path) for path in all_terminal_paths)

    if max_len == 0:
        return []  # Ходов не было

    max_len_paths = [path for path in all_terminal_paths if len(path) == max_len]

    # 2. Правило "Большего кубика": только без дубля и если сыграть можно
    #    лишь один кубик из двух
    if len(dice) == 2 and dice[0] != dice[1] and max_len == 1:
        higher_die = max(dice)
        higher_die_paths = [path for path in max_len_paths if path[0]['die'] == higher_die]
        if higher_die_paths:
            max_len_paths = higher_die_paths

    # 3. Убираем дубликаты, сохраняя порядок
    unique_turns = []
    seen = set()
    for path in max_len_paths:
        key = tuple((step['from'], step['to'], step['die']) for step in path)
        if key in seen:
            continue
        seen.add(key)
        unique_turns.append(path)

    return unique_turns


def get_legal_first_steps(possible_turns):
    """
    Шаги (from, to), которые можно сыграть прямо сейчас, без повторов.
    """
    steps = []
    for sequence in possible_turns:
        first = {'from': sequence[0]['from'], 'to': sequence[0]['to']}
        if first not in steps:
            steps.append(first)
    return steps


def get_single_moves(board_state, die, player_sign):
    """Ищет все одиночные ходы для одного кубика."""
    moves = []
    player_bar = board.get_bar_pos(player_sign)

    # 1. Шашки на баре: разрешен только вход
    if board_state[player_bar] * player_sign > 0:

        if player_sign == c.PLAYER_WHITE:
            to_point = c.BAR_WHITE - die  # (e.g., 25 - 6 = 19)
        else:
            # Черные входят на пункт 'die' (die 6 -> point 6)
            to_point = die

        if not board.is_point_blocked(board_state, to_point, player_sign):
            moves.append({'from': player_bar, 'to': to_point, 'die': die})
        return moves  # Если на баре, других ходов нет

    # 2. Ходы по доске
    possible_starts = [
        i for i in range(c.POINT_1, c.POINT_24 + 1)
        if board_state[i] * player_sign > 0
    ]

    is_all_home = board.is_all_home(board_state, player_sign)
    bear_off_pos = board.get_home_pos(player_sign)

    for fr in possible_starts:
        to = fr - (die * player_sign)  # (Белые: 24 -> 18, Черные: 1 -> 7)

        # 2.1 Обычный ход
        if c.POINT_1 <= to <= c.POINT_24:
            if not board.is_point_blocked(board_state, to, player_sign):
                moves.append({'from': fr, 'to': to, 'die': die})
            continue

        # 2.2 Выброс (Bear off)
        if not is_all_home:
            continue

        distance = fr if player_sign == c.PLAYER_WHITE else (c.POINT_24 + 1 - fr)

        if die == distance:
            moves.append({'from': fr, 'to': bear_off_pos, 'die': die})
            continue

        # Кубик больше расстояния: выбрасывать можно только самую дальнюю шашку
        is_furthest = all(
            board_state[i] * player_sign <= 0
            for i in board.get_home_board_range(player_sign)
            if (i - fr) * player_sign > 0
        )
        if is_furthest:
            moves.append({'from': fr, 'to': bear_off_pos, 'die': die})

    return moves
