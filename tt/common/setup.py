import os
import sys
from pathlib import Path
from dataclasses import dataclass

# Lil helper function to create a directory (and its parents) if missing.
def ensure_directory(path: Path):
    path.mkdir(parents=True,exist_ok=True)
    return path

# Dataclass for accessing paths across program.
@dataclass(frozen=False)
class ProjectPaths:

    data: Path

    logs: Path
    exports: Path

    @staticmethod
    def build():
        # TIMETRACKER_HOME wins, then APPDATA on Windows, then a dotfolder in the home directory.
        override = os.getenv("TIMETRACKER_HOME")
        appdata = os.getenv("APPDATA")
        if override:
            data = ensure_directory(Path(override))
        elif sys.platform == "win32" and appdata:
            data = ensure_directory(Path(appdata) / "TimeTracker")
        else:
            data = ensure_directory(Path.home() / ".timetracker")

        # Folders within the data folder
        logs = ensure_directory(data / "logs")
        exports = ensure_directory(data / "exports")

        return ProjectPaths(
            data = data,
            logs = logs,
            exports = exports,
        )
PATHS = ProjectPaths.build()
