"""
Exception types raised by the simulation engine.

ConfigError is raised before any simulation work begins when the input
configuration is invalid. InternalInvariantError signals an engine bug and
aborts the run without a partial result.
"""

from typing import List, Optional


class ConfigError(ValueError):
    """
    Invalid SimulationConfig.
    
    Attributes:
        errors: Individual validation messages (may be empty)
    """
    
    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors) if errors else []


class InternalInvariantError(RuntimeError):
    """A defensive engine check failed. Never caused by user input."""
