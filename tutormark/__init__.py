from .config import Settings, get_settings, load_settings
from .errors import ClusterInvariantError, InputTooLargeError, MarkupError, MarkupInputError

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "load_settings",
    "MarkupError",
    "MarkupInputError",
    "ClusterInvariantError",
    "InputTooLargeError",
]
