"""
Shared test helpers.
"""

from typing import Iterable


class SequenceRng:
    """Stand-in for numpy's Generator that replays fixed uniform draws."""
    
    def __init__(self, values: Iterable[float]):
        self._values = iter(values)
        self.calls = 0
    
    def random(self) -> float:
        self.calls += 1
        return next(self._values)
