
import logging
import os
from datetime import datetime

FILE_FORMAT = '%(levelname)s : %(name)s : %(funcName)s : %(lineno)d : %(message)s'
CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def _console_level():
    name = os.environ.get('MNCRIME_LOG_LEVEL', 'INFO').upper()
    level = logging.getLevelName(name)
    # getLevelName hands back a string for names it doesn't know
    return level if isinstance(level, int) else logging.INFO


def setup_logger(name):
    """
    Logger for an mncrime module

    Every logger writes DEBUG and up to a daily file in MNCRIME_LOG_DIR
    (default logs/), and MNCRIME_LOG_LEVEL and up (default INFO) to the
    console. An empty MNCRIME_LOG_DIR turns the file off.

    Parameters
    name (str) : Name of the logger, usually the module's __name__

    Returns:
    logging.Logger : Configured Logger Instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Handlers are attached once per logger name
    if logger.handlers:
        return logger

    log_dir = os.environ.get('MNCRIME_LOG_DIR', 'logs')
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f'mncrime_{datetime.now().strftime("%Y%m%d")}.log')
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(_console_level())
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    return logger
