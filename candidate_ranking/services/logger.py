import logging
import os

class AppLogger:
    _loggers = {}

    @staticmethod
    def get_logger(name="candidate_ranking"):
        if name in AppLogger._loggers:
            return AppLogger._loggers[name]

        level = os.getenv("LOG_LEVEL", "INFO").upper()

        logger = logging.getLogger(name)
        logger.setLevel(level)

        # Console formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Console handler, attached once even if the stdlib logger was configured elsewhere
        if not logger.handlers:
            ch = logging.StreamHandler()
            ch.setLevel(level)
            ch.setFormatter(formatter)
            logger.addHandler(ch)

        logger.propagate = False
        AppLogger._loggers[name] = logger
        return logger
