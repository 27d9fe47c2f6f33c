import logging
import logging.config
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


def configure_logging(config, verbose: bool = False) -> logging.Logger:
    """Apply the dictConfig built by PlannerConfig"""
    if config.log_to_file:
        config.log_dir.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(config.get_logging_config(verbose=verbose))
    return logging.getLogger()


def setup_logger(log_file: str, level: int = logging.INFO, max_bytes: int = 10_000_000,
                 backup_count: int = 5, logger: Optional[logging.Logger] = None) -> RotatingFileHandler:
    """Attach an extra rotating file handler (used by `zenith --log-file`)"""
    Path(log_file).parent.mkdir(exist_ok=True, parents=True)
    target = logger or logging.getLogger()
    handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s'))
    target.addHandler(handler)
    return handler
