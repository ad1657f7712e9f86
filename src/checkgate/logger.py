import logging

import notifiers.logging

from checkgate import config

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s - %(message)s"


def setup_logging(level=None) -> logging.Logger:
    logging.basicConfig(format=LOG_FORMAT, level=logging.INFO)
    level = config.OVERRIDE_LOGGING if level is None else level
    logging.getLogger().setLevel(level)
    logger = logging.getLogger("checkgate")
    logger.setLevel(level)
    get_log_handlers(logger)
    return logger


def get_log_handlers(logger):
    if config.TELEGRAM_TOKEN is None:
        return []
    if any(isinstance(h, notifiers.logging.NotificationHandler) for h in logger.handlers):
        return []
    handler = notifiers.logging.NotificationHandler(
        "telegram",
        defaults={
            "token": config.TELEGRAM_TOKEN,
            "chat_id": config.TELEGRAM_CHAT_ID,
        },
    )
    handler.setLevel(logging.WARNING)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return [handler]
