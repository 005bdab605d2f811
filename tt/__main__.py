import platform
import sys
from tt.common.logger import log
from tt.common.setup import PATHS
from tt.ui.app import main

# Exceptions raised inside Qt slots never reach run(), PySide6 only prints them. Log them instead so a broken
# button leaves a trace in latest.log, and keep the app alive.
def _log_unhandled(exc_type, exc_value, exc_tb):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    log.error("Unhandled exception in event loop", exc_info=(exc_type, exc_value, exc_tb))

# Entry point for `python -m tt` and the `timetracker` script
def run() -> None:
    log.info(f"Starting TimeTracker on Python {platform.python_version()} ({platform.system()}), data in '{PATHS.data}'")
    sys.excepthook = _log_unhandled
    try:
        main()
    except SystemExit:
        raise
    except Exception:
        # Full stack trace, always
        log.exception("Uncaught exception in entrypoint, exiting")
        sys.exit(1)

if __name__ == "__main__":
    run()
