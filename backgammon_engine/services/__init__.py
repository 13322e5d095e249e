# backgammon_engine/services/__init__.py

from .game_state import (
    GameState,
    STATE_CREATED,
    STATE_AWAITING_ROLL,
    STATE_ROLL_IN_PROGRESS,
    STATE_SELECTING_MOVES,
    STATE_TURN_COMPLETE,
    STATE_GAME_OVER,
)
from .game_turn_manager import GameTurnManager
from .game_session import Game
from .game_factory import GameFactory
from .game_registry import GameRegistry
from .logging_service import configure_logging
