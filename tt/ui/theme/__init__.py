"""Theme system: color palettes and stylesheet generation."""

THEMES = {
    "Light": {
        "background": "#f5f6f8",
        "surface": "#ffffff",
        "text": "#1f2328",
        "muted": "#6e7781",
        "accent": "#2f6fdf",
        "accent_text": "#ffffff",
        "danger": "#cf222e",
        "warning": "#9a6700",
        "warning_bg": "#fff8c5",
        "border": "#d0d7de",
    },
    "Dark": {
        "background": "#16181d",
        "surface": "#22252b",
        "text": "#e6edf3",
        "muted": "#8b949e",
        "accent": "#4c8dff",
        "accent_text": "#ffffff",
        "danger": "#f85149",
        "warning": "#d29922",
        "warning_bg": "#3a2f12",
        "border": "#30363d",
    },
}

FONT_FAMILY = "Segoe UI"


def build_stylesheet(theme_name):
    t = THEMES.get(theme_name, THEMES["Light"])
    return f"""
        QWidget {{ background-color: {t["background"]}; color: {t["text"]}; font-family: "{FONT_FAMILY}"; font-size: 11pt; }}
        QTabWidget::pane {{ border: 1px solid {t["border"]}; background: {t["surface"]}; }}
        QTabBar::tab {{ padding: 6px 18px; }}
        QTabBar::tab:selected {{ background: {t["surface"]}; color: {t["accent"]}; }}
        QLineEdit, QPlainTextEdit, QComboBox, QSpinBox, QDateTimeEdit {{
            background: {t["surface"]}; border: 1px solid {t["border"]}; border-radius: 4px; padding: 4px;
        }}
        QListWidget {{ background: {t["surface"]}; border: 1px solid {t["border"]}; }}
        QPushButton {{ background: {t["surface"]}; border: 1px solid {t["border"]}; border-radius: 4px; padding: 5px 12px; }}
        QPushButton:hover {{ border-color: {t["accent"]}; }}
        QPushButton#primary {{ background: {t["accent"]}; color: {t["accent_text"]}; border: none; }}
        QPushButton#danger {{ background: {t["danger"]}; color: {t["accent_text"]}; border: none; }}
        QLabel#clock {{ font-family: "Consolas", monospace; font-size: 40pt; }}
        QLabel#muted {{ color: {t["muted"]}; }}
        QLabel#error {{ color: {t["danger"]}; }}
        QFrame#reminder {{ background: {t["warning_bg"]}; border: 1px solid {t["warning"]}; border-radius: 4px; }}
        QFrame#reminder QLabel {{ color: {t["warning"]}; background: transparent; font-weight: bold; }}
    """


__all__ = ["THEMES", "FONT_FAMILY", "build_stylesheet"]
