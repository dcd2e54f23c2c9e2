"""
Utility modules for Slot Finder
"""

from .logger import SlotFinderLogger
from .validators import RequestValidator, DataSanitizer

__all__ = ['SlotFinderLogger', 'RequestValidator', 'DataSanitizer']
