"""I/O helper subpackage."""
from . import yanny

__all__ = ["yanny"]
