# backgammon_engine/services/logging_service.py

import os
import logging

logger = logging.getLogger(__name__)

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def configure_logging(config):
    """
    Настраивает логгер пакета: уровень из LOG_LEVEL и,
    если задан LOG_FILE, файловый обработчик.
    Возвращает добавленный обработчик (или None).
    """
    package_logger = logging.getLogger('backgammon_engine')
    package_logger.setLevel(config['LOG_LEVEL'])

    log_path = config['LOG_FILE']
    if not log_path:
        return None

    # Повторная настройка не должна дублировать записи
    for handler in package_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == os.path.abspath(log_path):
            return handler

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(config['LOG_LEVEL'])
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    package_logger.addHandler(file_handler)
    logger.info("Файловый логгер настроен: %s", log_path)
    return file_handler