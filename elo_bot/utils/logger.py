import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional, Union

from elo_bot.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def log_file_for(log_dir: Union[str, Path], day: Optional[date] = None) -> Path:
    """One log file per day, e.g. logs/elo_bot_20240131.log"""
    day = day or date.today()
    return Path(log_dir) / f"elo_bot_{day:%Y%m%d}.log"


def setup_logger(name: str, log_dir: Union[str, Path, None] = None) -> logging.Logger:
    """
    Return the named logger, attaching handlers on first use only.

    Records go to stdout at INFO (DEBUG when Config.DEBUG is set) and, unless
    the log directory is empty, to a per-day file at DEBUG.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = logging.DEBUG if Config.DEBUG else logging.INFO
    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    stdout = logging.StreamHandler(sys.stdout)
    stdout.setLevel(level)
    stdout.setFormatter(formatter)
    logger.addHandler(stdout)

    target_dir = Config.LOG_DIR if log_dir is None else log_dir
    if target_dir:
        path = log_file_for(target_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        to_file = logging.FileHandler(path, encoding='utf-8')
        to_file.setLevel(logging.DEBUG)
        to_file.setFormatter(formatter)
        logger.addHandler(to_file)

    return logger
