import logging
from logging.handlers import RotatingFileHandler

from . import config


def setup_logging():
    logger = logging.getLogger("journey")

    # Guard against duplicate handlers on repeated calls (Streamlit reruns)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter("%(asctime)s | %(name)s | %(levelname)s | %(message)s")

    # File handler: rotating, DEBUG level
    try:
        config.LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.LOG_DIR / "journey.log",
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
        )
    except OSError as e:
        logger.warning("File logging disabled (%s): %s", config.LOG_DIR, e)
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Console handler: WARNING level (keep terminal quiet)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
