# backgammon_engine/services/game_registry.py

import threading
from typing import Optional, Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .game_session import Game
    from .game_factory import GameFactory


class GameRegistry:
    """
    Отвечает ИСКЛЮЧИТЕЛЬНО за хранение и поиск независимых партий
    (несколько столов в одном процессе).
    Сам реестр потокобезопасен, отдельные партии - нет.
    """
    def __init__(self, factory: 'GameFactory', log_event_func=None):
        self.factory = factory
        self.games: Dict[str, 'Game'] = {}  # game_id -> Game

        self.lock = threading.RLock()
        self.log_event = log_event_func or (lambda *args, **kwargs: None)

    def create_game(self, **kwargs) -> 'Game':
        """Создает партию через фабрику и сразу регистрирует ее."""
        game = self.factory.create_game(**kwargs)
        self.add_game(game)
        return game

    def add_game(self, game: 'Game'):
        """
        Регистрирует партию. Повторный id: ValueError.
        """
        game_id = game.id
        with self.lock:
            if game_id in self.games:
                self.log_event("REGISTRY_WARN", f"Game {game_id} already registered.", game_id=game_id)
                raise ValueError(f"Game {game_id} is already registered")

            self.games[game_id] = game
            self.log_event("REGISTRY_ADD", f"Game {game_id} added. Total games: {len(self.games)}", game_id=game_id)

    def remove_game_by_id(self, game_id: str) -> Optional['Game']:
        """
        Удаляет партию из реестра и возвращает ее (или None).
        """
        if not game_id:
            return None

        with self.lock:
            game = self.games.pop(game_id, None)
            if game is None:
                self.log_event("REGISTRY_WARN", f"Tried to remove unknown game {game_id}", game_id=game_id)
                return None

            self.log_event("REGISTRY_REMOVE", f"Game {game_id} removed. Games left: {len(self.games)}", game_id=game_id)
            return game

    def get_by_game_id(self, game_id: str) -> Optional['Game']:
        """Получить партию по ID."""
        with self.lock:
            return self.games.get(game_id)

    def list_game_ids(self) -> List[str]:
        with self.lock:
            return list(self.games)

    def __len__(self):
        with self.lock:
            return len(self.games)
