"""
Slot Finder - An AI-assisted meeting slot finder

This package turns a free-text scheduling request into ranked meeting windows:
- Extracts scheduling parameters from natural language with an LLM
- Resolves business days and day selectors (first N days, specific weekdays)
- Generates and scores candidate slots against participant availability
- Distributes and formats the best slots across the requested days
"""

__version__ = "1.0.0"
__author__ = "Slot Finder Team"
