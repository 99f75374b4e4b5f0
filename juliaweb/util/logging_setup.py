import contextlib
import logging
import logging.handlers
import multiprocessing as mp
import time
from typing import Iterator, Optional

_LOGGER_NAME = "juliaweb"

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)

def level_from_name(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)

def _build_formatter() -> logging.Formatter:
    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03dZ %(processName)s %(levelname)s %(name)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    fmt.converter = time.gmtime
    return fmt

def _reset_handlers(logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)
    logger.propagate = False
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

def configure_root_logging(
    *,
    level: int = logging.INFO,
    console: bool = True,
    log_file: Optional[str] = None,
    rotate_bytes: int = 5 * 1024 * 1024,
    rotate_count: int = 5,
) -> logging.Logger:
    """Install console and rotating-file handlers on the package logger of the main process."""
    logger = get_logger()
    _reset_handlers(logger, level)
    fmt = _build_formatter()
    handlers = []
    if console:
        handlers.append(logging.StreamHandler())
    if log_file:
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=rotate_bytes, backupCount=rotate_count, encoding="utf-8"
        ))
    for h in handlers:
        h.setLevel(level)
        h.setFormatter(fmt)
        logger.addHandler(h)
    return logger

@contextlib.contextmanager
def worker_log_queue(listener_logger: logging.Logger) -> Iterator[mp.Queue]:
    """
    Yield a queue that render workers log into. A listener thread replays the records
    through the handlers of `listener_logger` until the block exits.
    """
    queue: mp.Queue = mp.Queue(-1)
    listener = logging.handlers.QueueListener(queue, *listener_logger.handlers, respect_handler_level=True)
    listener.start()
    try:
        yield queue
    finally:
        listener.stop()
        queue.close()

def configure_worker_logging(queue: Optional[mp.Queue], level: int = logging.INFO) -> None:
    # Without a queue the worker keeps whatever handlers it inherited from the parent.
    if queue is None:
        return
    logger = get_logger()
    _reset_handlers(logger, level)
    qh = logging.handlers.QueueHandler(queue)
    qh.setLevel(level)
    logger.addHandler(qh)
