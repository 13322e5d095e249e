# backgammon_engine/game_core/__init__.py

# "Публичный API" ядра правил
from .constants import (
    PLAYER_WHITE, PLAYER_BLACK, WINNING_SCORE, CHECKERS_PER_PLAYER
)

from .exceptions import (
    BackgammonError,
    InvalidStateError,
    IllegalMoveError,
    InvalidBoardError
)

from .board_state import (
    create_initial_board_state,
    build_board,
    validate_board,
    check_step,
    apply_step,
    undo_move_on_board
)

from .move_generator import (
    get_all_possible_turns,
    get_legal_first_steps,
    get_single_moves
)

from .move_validator import (
    get_move_details
)

from .utils import (
    roll_dice,
    is_doubles,
    get_move_values,
    has_won,
    get_winner,
    are_moves_available
)
