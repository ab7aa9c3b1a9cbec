import logging
from pathlib import Path

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name="mimipro", log_file: Path | None = None, level=logging.INFO):
    """
    Configure (once) and return the application logger.

    Child loggers created with logging.getLogger(__name__) inside the
    package propagate here. `log_file` adds an append-only file handler.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(level)
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(ch)
        if log_file is not None:
            try:
                Path(log_file).parent.mkdir(parents=True, exist_ok=True)
                fh = logging.FileHandler(str(log_file), mode="a", encoding="utf-8", delay=True)
            except OSError as e:
                logger.warning("File logging disabled (%s): %s", log_file, e)
            else:
                fh.setFormatter(logging.Formatter(_FORMAT))
                logger.addHandler(fh)
    return logger
