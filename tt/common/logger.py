import logging
import os
from pathlib import Path
from logging.handlers import RotatingFileHandler
from tt.common.setup import PATHS
from datetime import datetime

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(filename)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third party loggers whose output should land in our files too, at the given minimum level. httpx logs every
# request at INFO, which is just noise next to our own store logging.
_LIBRARY_LEVELS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}

# Reads a level name like "INFO" from the environment, falling back to `default` on anything unrecognized.
def _env_level(var, default):
    value = os.getenv(var, "").strip().upper()
    level = logging.getLevelName(value) if value else default
    return level if isinstance(level, int) else default

# Attaches `handler` under `handler_name` unless a handler of that name is already there, so re-importing or
# calling get_logger twice never doubles every line.
def _attach_once(logger, handler_name, make_handler, level, fmt):
    if any(h.get_name() == handler_name for h in logger.handlers):
        return None
    handler = make_handler()
    handler.setLevel(level)
    handler.setFormatter(fmt)
    handler.set_name(handler_name)
    logger.addHandler(handler)
    return handler

# Keeps only the newest `keep` per-run debug logs.
def _prune_debug_logs(debug_dir: Path, name, keep):
    runs = sorted(debug_dir.glob(f"{name}_*.log"), key=lambda p: p.stat().st_mtime, reverse=True)
    for run in runs[keep:]:
        try:
            run.unlink()
        except OSError:
            # Likely still held open by another running instance
            pass

def get_logger(
        name = "timetracker",
        level = logging.INFO,
        log_dir: Path | None = None,
        max_bytes = 5 * 1024 * 1024,
        backup_count = 5,
        console = False,
        historical_debugs: int = 10
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(min(level, logging.DEBUG) if historical_debugs > 0 else level)

    log_dir = log_dir or PATHS.logs
    log_dir.mkdir(parents=True,exist_ok=True)
    fmt = logging.Formatter(LOG_FORMAT,LOG_DATE_FORMAT)

    handlers = []

    # timetracker.log rotates and survives across runs, latest.log only ever holds this run
    handlers.append(_attach_once(
        logger, f"{name}:persistent",
        lambda: RotatingFileHandler(log_dir / f"{name}.log", maxBytes=max_bytes, backupCount=backup_count,
                                    encoding="utf-8"),
        level, fmt))
    handlers.append(_attach_once(
        logger, f"{name}:latest",
        lambda: logging.FileHandler(log_dir / "latest.log", mode="w", encoding="utf-8"),
        level, fmt))

    # One DEBUG file per run under logs/debug
    if historical_debugs > 0:
        debug_dir = log_dir / "debug"
        debug_dir.mkdir(parents=True,exist_ok=True)
        this_run = debug_dir / f"{name}_{datetime.now():%Y-%m-%d_%H-%M-%S}.log"
        added = _attach_once(
            logger, f"{name}:historical_debug",
            lambda: logging.FileHandler(this_run, encoding="utf-8"),
            logging.DEBUG, fmt)
        handlers.append(added)
        if added is not None:
            _prune_debug_logs(debug_dir, name, historical_debugs)

    if console:
        handlers.append(_attach_once(logger, f"{name}:console", logging.StreamHandler, level, fmt))

    # Route library warnings (timeouts, TLS trouble) into the same files
    for lib_name, lib_level in _LIBRARY_LEVELS.items():
        lib_logger = logging.getLogger(lib_name)
        lib_logger.setLevel(lib_level)
        lib_logger.propagate = False
        for handler in handlers:
            if handler is not None and handler not in lib_logger.handlers:
                lib_logger.addHandler(handler)

    return logger

# TIMETRACKER_LOG_LEVEL tunes the persistent logs, TIMETRACKER_LOG_CONSOLE=1 mirrors them to stderr.
log = get_logger(
    level=_env_level("TIMETRACKER_LOG_LEVEL", logging.INFO),
    console=os.getenv("TIMETRACKER_LOG_CONSOLE", "") == "1",
    historical_debugs=10,
)
log.info("=== INITIALIZED NEW SESSION ===")
