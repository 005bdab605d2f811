import json
from tt.common.logger import log
from tt.common.setup import PATHS
from tt.util import now_iso


_SCHEMA_VERSION = 1

#region === Helpers and Paths ===

SETTINGS_PATH = PATHS.data / "settings.json"

# Default values for every setting. Anything missing from settings.json gets filled from here.
_SETTINGS_DEFAULTS = {
    "supabase_url": "",
    "supabase_key": "",
    "request_timeout": 10.0,
    "reminder_minutes": 30,
    "admin_passphrase": "",
    "last_email": "",
    "theme": "Light",
    "export_dir": "",
}

# Helper to return a truly fresh, default settings dict.
def build_default_settings():
    return {
        "meta": {
            "schema_version": _SCHEMA_VERSION,
            "saved_at": now_iso(),
        },
        "settings": dict(_SETTINGS_DEFAULTS),
        "stopwatch": {"elapsed": 0, "running": False, "anchor": None},
    }

#endregion === Helpers and Paths ===

#region === Saving and Loading Settings ===

# Loads settings.json, validating each section and defaulting whatever is missing or malformed.
def load_settings():
    try:
        if not SETTINGS_PATH.exists():
            log.info("No existing settings.json found, loading fresh settings dict.")
            return build_default_settings()

        with open(SETTINGS_PATH, "r", encoding="utf-8") as f:
            state = json.load(f)
        if not isinstance(state, dict):
            raise TypeError("settings.json does not hold an object")
        defaulted_values = set()

        # Validate the meta dict
        if "meta" not in state or not isinstance(state["meta"], dict):
            defaulted_values.add("meta")
            state["meta"] = {}
        if "schema_version" not in state["meta"] or not isinstance(state["meta"]["schema_version"], int):
            defaulted_values.add("meta.schema_version")
            state["meta"]["schema_version"] = _SCHEMA_VERSION

        # Validate the settings dict, fill in any necessary defaults
        if "settings" not in state or not isinstance(state["settings"], dict):
            defaulted_values.add("settings")
            state["settings"] = dict(_SETTINGS_DEFAULTS)
        else:
            for key, default in _SETTINGS_DEFAULTS.items():
                if key not in state["settings"]:
                    defaulted_values.add(f"settings.{key}")
                    state["settings"][key] = default

        # Validate the stopwatch snapshot
        sw = state.get("stopwatch")
        if not isinstance(sw, dict) or not isinstance(sw.get("elapsed", 0), int):
            defaulted_values.add("stopwatch")
            state["stopwatch"] = {"elapsed": 0, "running": False, "anchor": None}

        if defaulted_values:
            log.warning(f"Loaded settings from '{SETTINGS_PATH}', but with missing values that were defaulted: {', '.join(sorted(defaulted_values))}")
        else:
            log.info(f"Successfully loaded settings from '{SETTINGS_PATH}'.")
        return state
    # Fall back to a fresh settings dict in case of error, but warn in log
    except (json.JSONDecodeError, OSError, TypeError):
        log.warning("Ran into an error while trying to load settings.json, falling back to a fresh settings dict.",exc_info=True)
        return build_default_settings()

# Write the given settings dict to disk.
def save_settings(state):
    state.setdefault("meta", {})["saved_at"] = now_iso()
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    with open(SETTINGS_PATH, "w", encoding="utf-8") as f:
        json.dump(state, f, indent=2)
    log.info(f"Successfully saved settings to '{SETTINGS_PATH}'")

#endregion === Saving and Loading Settings ===
