"""
Pytest fixtures for backgammon_engine tests.
"""

import pytest

from ..config import get_config
from ..game_core import PLAYER_WHITE
from ..services import Game


class ScriptedDice:
    """Dice source that returns pre-recorded rolls in order."""

    def __init__(self, rolls):
        self.rolls = list(rolls)

    def __call__(self):
        if not self.rolls:
            raise AssertionError("No scripted rolls left")
        return self.rolls.pop(0)


@pytest.fixture
def make_game():
    """
    Factory for games with scripted dice.

    make_game(rolls=[(6, 5)], board=None, first_player=PLAYER_WHITE,
              start=True, **config_overrides)
    """
    def _make(rolls=(), board=None, first_player=PLAYER_WHITE, start=True, **config_overrides):
        config = get_config(config_overrides)
        game = Game(
            game_id="test_game",
            config=config,
            dice_source=ScriptedDice(rolls),
            board=board,
        )
        if start:
            game.start_game(first_player)
        return game

    return _make


@pytest.fixture
def events():
    """Listener that records event names and payloads."""
    recorded = []

    def listener(notification):
        recorded.append((notification['event'], notification['payload']))

    listener.recorded = recorded
    return listener
