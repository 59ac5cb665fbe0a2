"""
Utility modules for the story engine
"""

from .jsonlogic import JSONLogicEvaluator
from .random_source import RandomSource, default_random_source

__all__ = [
    "JSONLogicEvaluator",
    "RandomSource",
    "default_random_source",
]
