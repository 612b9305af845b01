#!/usr/bin/env python3
"""
Onboarding heuristics for repository migrations
"""

__version__ = "0.1.0"

from onboard_heuristics.core.config import HeuristicsConfig, load_config

# Import the main classes for easier access
from onboard_heuristics.core.heuristics_provider import ConfigHeuristicsInputProvider
from onboard_heuristics.core.inputs import InputProviderResolver, Inputs
from onboard_heuristics.types import HeuristicsResult
