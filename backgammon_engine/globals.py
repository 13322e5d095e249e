# backgammon_engine/globals.py

import logging

from .game_core.constants import PLAYER_NAMES

event_logger = logging.getLogger('backgammon_engine.events')


def log_event(event_type, message, game_id=None, player=None, extra_data=None, level=logging.INFO, exc_info=False):
    """
    Пишет структурированное событие движка одной строкой
    в логгер 'backgammon_engine.events'.
    """
    log_entry = f"[TYPE: {event_type}]"

    if game_id:
        log_entry += f" [GameID: {game_id}]"
    if player:
        log_entry += f" [Player: {PLAYER_NAMES.get(player, player)}]"
    if extra_data:
        log_entry += f" [Data: {extra_data}]"

    log_entry += f" | {message}"

    event_logger.log(level, log_entry, exc_info=exc_info)
