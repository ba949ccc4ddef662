"""Chat Life: an audience-driven artificial-life simulation."""

from .config import Config, ConfigurationError
from .world import Population, StepStats

__all__ = ["Config", "ConfigurationError", "Population", "StepStats"]
