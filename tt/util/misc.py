import re
from datetime import datetime

# Fractional seconds, just before the offset or the end of the string
_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d{2}:?\d{2}$|$)")


# Simply returns the current local time as an ISO8601 string with timezone offset.
def now_iso():
    return datetime.now().astimezone().isoformat()


# Current local time as an aware datetime. Everything timestamped in the app goes through here.
def now_local():
    return datetime.now().astimezone()


# Parses an ISO8601 string from the backend into an aware local datetime. Supabase sends "Z" suffixes, and
# naive values (typed into the edit dialog) are taken as local time.
def parse_iso(value):
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # Postgres trims trailing zeros from microseconds, older fromisoformat only takes 3 or 6 digits
        text = _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], text, count=1)
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.now().astimezone().tzinfo)
    return dt.astimezone()


# Formats a datetime the way the history list and the export show it, i.e. 05/03/2025 14:07
def format_datetime(dt):
    return parse_iso(dt).strftime("%d/%m/%Y %H:%M")
