import logging
import sys
import contextvars
from typing import Optional

# Context variable to carry the current run id across the call chain
_RUN_ID: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")


class _RunIdFilter(logging.Filter):
    """Logging filter that injects the run_id from contextvars into the record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.run_id = _RUN_ID.get()
        return True


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | run=%(run_id)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def configure_root_logger(level: str = "INFO") -> None:
    """
    Configure root logger and the carbon_intensity logger.

    Root logger stays at INFO to suppress library noise (httpx, librdkafka, etc).
    Only carbon_intensity namespace logs are set to the requested level.

    Args:
        level: Log level for carbon_intensity logs (DEBUG, INFO, WARNING, ERROR).

    Safe to call multiple times; it will not duplicate handlers.
    """
    root = logging.getLogger()

    for h in root.handlers:
        if isinstance(h, logging.StreamHandler) and any(isinstance(f, _RunIdFilter) for f in h.filters):
            logging.getLogger("carbon_intensity").setLevel(_level(level))
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter())
    handler.addFilter(_RunIdFilter())
    root.addHandler(handler)
    root.setLevel(logging.INFO)

    logging.getLogger("carbon_intensity").setLevel(_level(level))


_CONFIGURED = False


def _configure_once() -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return
    configure_root_logger("INFO")
    _CONFIGURED = True


def get_logger(name: str = "carbon_intensity") -> logging.Logger:
    """
    Get a module-specific logger. Level is inherited from the carbon_intensity
    namespace logger so a single configure_root_logger() call controls it.
    """
    _configure_once()
    return logging.getLogger(name)


def push_run_id(run_id: Optional[str]) -> Optional[contextvars.Token]:
    """Set the current run id in context and return a token for later reset."""
    if not run_id:
        return None
    return _RUN_ID.set(run_id)


def reset_run_id(token: Optional[contextvars.Token]) -> None:
    """Reset the run id context using the provided token (if any)."""
    if token is None:
        return
    _RUN_ID.reset(token)


def current_run_id() -> str:
    return _RUN_ID.get()
