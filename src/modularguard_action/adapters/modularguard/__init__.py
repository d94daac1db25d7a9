# modularguard/__init__.py

from .download import download_modularguard, get_arch, get_platform, resolve_version
from .execute import execute_modularguard, parse_result

__all__ = [
    "download_modularguard",
    "execute_modularguard",
    "get_arch",
    "get_platform",
    "parse_result",
    "resolve_version",
]
