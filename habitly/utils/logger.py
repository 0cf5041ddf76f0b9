# utils/logger.py

import logging
import logging.config
from typing import Optional

from habitly.config import HabitlyConfig, config as default_config


def setup_logging(cfg: Optional[HabitlyConfig] = None) -> logging.Logger:
    cfg = cfg or default_config
    if cfg.log_to_file:
        cfg.log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(cfg.get_logging_config())
    return logging.getLogger("habitly")
