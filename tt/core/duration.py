"""Duration formatting and parsing. Pure functions over whole seconds, no UI."""


def _whole(seconds):
    return max(0, int(seconds))


def format_clock(seconds):
    """Format seconds as HH:MM:SS. Hours are not capped at 24, negatives clamp to zero."""
    seconds = _whole(seconds)
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_hours_minutes(seconds):
    """Format seconds as "Hh Mm", dropping leftover seconds."""
    seconds = _whole(seconds)
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"


def seconds_to_decimal_hours_string(seconds):
    """Format seconds as "H.MM" for the edit dialog's hours field.

    The fractional part is round(minutes / 60 * 100), so 30 minutes shows as
    ".50" and 10 minutes as ".17". Seconds are dropped.
    """
    seconds = _whole(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    frac = round(minutes / 60 * 100)
    return f"{hours}.{frac:02d}"


def decimal_hours_string_to_seconds(value):
    """Parse the edit dialog's "H.MM" field back into seconds.

    The digits after the dot are read as an integer d and contribute
    d * 0.6 minutes, which is not the inverse of
    seconds_to_decimal_hours_string: "0.17" parses to 612 seconds, not 600.
    """
    text = str(value).strip()
    hours_part, _, frac_part = text.partition(".")
    try:
        h = int(hours_part)
    except ValueError:
        h = 0
    try:
        m = int(frac_part) * 0.6 if frac_part else 0
    except ValueError:
        m = 0
    total = h * 3600 + m * 60
    if isinstance(total, float) and total.is_integer():
        return int(total)
    return total


def format_decimal_hours(seconds):
    """Plain seconds / 3600 to two decimals, as used in the spreadsheet export."""
    return f"{_whole(seconds) / 3600:.2f}"
