"""
Metamorphic test driver: configuration, console logging, orchestration and CLI
"""

from .config_parser import ConfigParser, RunConfig
from .orchestrator import Baseline, BatchSummary, Orchestrator, UnitResult

__all__ = [
    'ConfigParser',
    'RunConfig',
    'Baseline',
    'BatchSummary',
    'Orchestrator',
    'UnitResult',
]
