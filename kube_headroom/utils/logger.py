import click
import logging
from typing import Optional

LOG_FORMAT = '%(asctime)s %(name)-12s %(levelname)-8s %(message)s'

# Level applied to loggers that are created without an explicit level
_DEFAULT_LEVEL = logging.INFO


def verbosity_to_level(verbosity: int) -> int:
    '''Map the count of -v flags to a logging level.'''
    return logging.DEBUG if verbosity > 0 else logging.INFO


def set_global_log_level(level: int):
    """Apply level to every kube_headroom logger and to loggers created later."""
    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = level

    for name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and name.startswith("kube_headroom"):
            logger.setLevel(level)


def _context_level() -> Optional[int]:
    ctx = click.get_current_context(silent=True)
    if ctx is None or ctx.obj is None:
        return None
    return getattr(ctx.obj, 'verbose', None)


def get_module_logger(mod_name: str, log_level: Optional[int] = None):
    '''Logger with a single stderr handler, levelled by -v or the global level.'''
    level = log_level
    if level is None:
        level = _context_level() or _DEFAULT_LEVEL

    logger = logging.getLogger(mod_name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    logger.setLevel(level)
    return logger
