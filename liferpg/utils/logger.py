import logging
import logging.config
from logging.handlers import RotatingFileHandler
from pathlib import Path

def setup_logger(log_file: str = "logs/liferpg.log", max_bytes: int = 10_000_000, backup_count: int = 5,
                 level: int = logging.INFO):
    Path(log_file).parent.mkdir(exist_ok=True, parents=True)
    logger = logging.getLogger()
    logger.setLevel(level)
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)
    return logger

def configure_logging(app_config=None):
    """Применить dictConfig из конфигурации приложения"""
    if app_config is None:
        from liferpg.config import config as app_config
    app_config.ensure_directories()
    logging.config.dictConfig(app_config.get_logging_config())
    return logging.getLogger()
