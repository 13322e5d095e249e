# backgammon_engine/game_core/move_validator.py

from . import constants as c


def get_move_details(board, dice, player_sign, step, possible_turns):
    """
    Проверяет ход и возвращает (is_valid, die_used, was_blot).

    step: {'from', 'to'} во внутренних индексах. Ход легален, только если
    он начинает одну из легальных полных последовательностей.
    """

    # 1. Какие кубики дают этот шаг в начале легальной последовательности
    candidate_dice = set()
    for sequence in possible_turns:
        if not sequence:
            continue
        first = sequence[0]
        if first['from'] == step['from'] and first['to'] == step['to']:
            candidate_dice.add(first['die'])

    if not candidate_dice:
        return False, None, False

    # 2. Один шаг может соответствовать нескольким кубикам
    #    (выброс точным и большим кубиком). Тратим меньший.
    die_used = min(candidate_dice)

    # 3. Проверяем, был ли сбит блот
    was_blot = c.POINT_1 <= step['to'] <= c.POINT_24 and board[step['to']] * player_sign == -1

    return True, die_used, was_blot
