"""RecallForge - Spaced repetition study scheduler.

Decides when each study item becomes due again and which item to practice
next, using a forgetting-curve weight model and weighted random selection.
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
