# Common utilities and shared modules
"""
Shared components used by every pipeline stage:
- Data models (Pydantic schemas)
- Error taxonomy
- Logging configuration
- Project configuration
"""

from .config import PROJECT_ROOT, DATA_DIR, Settings
from .logging import setup_logging

__all__ = [
    "PROJECT_ROOT",
    "DATA_DIR",
    "Settings",
    "setup_logging",
]
