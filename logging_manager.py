import logging
import sys

from config import settings

_ROOT_LOGGER_NAME = "scout"
_configured = False


class PrefixedLogger(logging.LoggerAdapter):
    """Prepends a component tag such as ``[SessionStore]`` to every record."""

    def process(self, msg, kwargs):
        prefix = self.extra.get("prefix")
        if prefix:
            msg = f"{prefix} {msg}"
        return msg, kwargs


def _configure_root():
    global _configured
    if _configured:
        return
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL)
    _configured = True


def get_logger(name: str = _ROOT_LOGGER_NAME, prefix: str = "") -> PrefixedLogger:
    _configure_root()
    if name != _ROOT_LOGGER_NAME and not name.startswith(_ROOT_LOGGER_NAME + "."):
        name = f"{_ROOT_LOGGER_NAME}.{name}"
    return PrefixedLogger(logging.getLogger(name), {"prefix": prefix})
