import logging

from .config import Config, get_config
from .globals import log_event
from .game_core import (
    PLAYER_WHITE,
    PLAYER_BLACK,
    BackgammonError,
    InvalidStateError,
    IllegalMoveError,
    InvalidBoardError,
    build_board,
    create_initial_board_state,
)
from .services import (
    Game,
    GameFactory,
    GameRegistry,
    configure_logging,
    STATE_CREATED,
    STATE_AWAITING_ROLL,
    STATE_ROLL_IN_PROGRESS,
    STATE_SELECTING_MOVES,
    STATE_TURN_COMPLETE,
    STATE_GAME_OVER,
)

__version__ = "0.1.0"

# Получаем логгер
logger = logging.getLogger(__name__)


def create_engine(config_overrides=None, seed=None):
    """
    Фабрика движка: конфиг -> логирование -> фабрика партий -> реестр.
    """

    # 1. Загрузка конфигурации
    config = get_config(config_overrides)

    # 2. Настройка логирования
    configure_logging(config)

    # 3. Фабрика и реестр партий
    factory = GameFactory(config=config, log_event=log_event, seed=seed)
    registry = GameRegistry(factory=factory, log_event_func=log_event)

    logger.info("Движок создан (AUTO_END_TURN=%s).", config['AUTO_END_TURN'])
    return registry
