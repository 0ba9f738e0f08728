"""
Core module for the PDF section digest system.
"""

from .config import settings
from .models import *

__all__ = ["settings"]
