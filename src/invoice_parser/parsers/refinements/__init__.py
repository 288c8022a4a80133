"""Bank-specific parser refinements.

Each refinement extends GenericParser and overrides only what's different
for that specific bank (section headers, line layout, sign rules, etc.).
"""

from .inter import InterParser
from .itau import ItauParser

__all__ = ["ItauParser", "InterParser"]
