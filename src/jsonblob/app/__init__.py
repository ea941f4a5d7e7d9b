from .core.env import Env, get_env, get_env_flags
from .core.logging import JsonFormatter, setup_logging
from .settings import BlobSettings, get_blob_settings

__all__ = [
    "Env",
    "get_env",
    "get_env_flags",
    "JsonFormatter",
    "setup_logging",
    "BlobSettings",
    "get_blob_settings",
]
