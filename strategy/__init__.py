# PATH: strategy/__init__.py
"""Strategy package for FLASHSIM."""

from strategy.config import (
    SimulationConfig,
    load_simulation_config,
    parse_simulation_config,
)
from strategy.scanner import (
    evaluate_route,
    find_spatial,
    find_triangular,
    scan,
)

__all__ = [
    "SimulationConfig",
    "load_simulation_config",
    "parse_simulation_config",
    "evaluate_route",
    "find_spatial",
    "find_triangular",
    "scan",
]
