from ._metadata import metadata

from . import audit
from . import auth


__all__ = [
    "audit",
    "auth",
    "metadata",
]
