# backgammon_engine/config.py

from .game_core.constants import PLAYER_WHITE


class Config:
    """Базовый класс конфигурации (безопасные значения)."""

    LOG_FILE = None  # None = только стандартные обработчики logging
    LOG_LEVEL = 'INFO'

    # --- Начало партии ---
    FIRST_PLAYER = PLAYER_WHITE
    # Классический розыгрыш первого хода: каждый бросает по кубику
    OPENING_ROLL_OFF = False

    # --- Ход ---
    # Передавать ход сразу, как только ходов не осталось
    AUTO_END_TURN = True
    ALLOW_UNDO = True


def get_config(overrides=None, config_object=Config):
    """
    Собирает dict из UPPER_CASE атрибутов (как Flask config.from_object)
    и применяет overrides. Неизвестный ключ: KeyError.
    """
    config = {
        key: getattr(config_object, key)
        for key in dir(config_object)
        if key.isupper()
    }
    for key, value in (overrides or {}).items():
        if key not in config:
            raise KeyError(f"Unknown config key: {key}")
        config[key] = value
    return config
