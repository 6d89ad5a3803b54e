import logging
from typing import Optional

# uvicorn knows a "trace" level, stdlib logging does not
LEVEL_ALIASES = {"TRACE": logging.DEBUG}


def _to_level(level: str) -> Optional[int]:
    name = level.strip().upper()
    if name in LEVEL_ALIASES:
        return LEVEL_ALIASES[name]
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else None


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    return a module logger. if nothing configured logging yet (no uvicorn,
    plain import from a script or test) install a basicConfig once.
    unknown level names are ignored and the logger keeps its level.
    """
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers and not logger.handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s"
        )
    if level:
        numeric = _to_level(level)
        if numeric is not None:
            logger.setLevel(numeric)
    return logger
