# backgammon_engine/services/game_factory.py

import uuid
import random
from typing import Dict, Any, Callable, Optional, List

from .game_session import Game, DiceSource
from .game_turn_manager import GameTurnManager


class GameFactory:
    """
    Собирает партию со всеми зависимостями (конфиг, логгер, кубики).
    """

    def __init__(
        self,
        config: Dict[str, Any],
        log_event: Callable,
        seed: Optional[int] = None,
    ):
        self.config = config
        self.log_event = log_event
        # Общий генератор фабрики: с seed все партии воспроизводимы
        self.rng = random.Random(seed)

    def create_game(
        self,
        game_id: Optional[str] = None,
        dice_source: Optional[DiceSource] = None,
        board: Optional[List[int]] = None,
    ) -> Game:
        game_id = game_id or str(uuid.uuid4())

        turn_manager = GameTurnManager(
            game_id=game_id,
            config=self.config,
            log_event=self.log_event,
        )

        game = Game(
            game_id=game_id,
            config=self.config,
            log_event=self.log_event,
            dice_source=dice_source,
            rng=random.Random(self.rng.getrandbits(64)),
            board=board,
            turn_manager=turn_manager,
        )

        self.log_event("GAME_CREATED", f"Game {game_id} created.", game_id=game_id)
        return game
