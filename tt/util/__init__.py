from .misc import now_iso, now_local, parse_iso, format_datetime

__all__ = ["now_iso", "now_local", "parse_iso", "format_datetime"]
