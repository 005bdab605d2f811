from .auth import AuthDialog
from .edit_entry import EditEntryDialog
from .settings import ConfigDialog

__all__ = ["AuthDialog", "EditEntryDialog", "ConfigDialog"]
