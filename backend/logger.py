import logging
import sys

FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATEFMT = '%Y-%m-%d %H:%M:%S'


def setup_logger(level="INFO", log_file=None, name="backend"):
    """Configure the package logger once and return it."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers when the factory runs more than once (tests)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(FORMAT, datefmt=DATEFMT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
