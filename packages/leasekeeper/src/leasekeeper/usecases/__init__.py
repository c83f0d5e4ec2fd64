"""Use cases: Business logic orchestration."""

from leasekeeper.usecases.config_parser import ConfigParser
from leasekeeper.usecases.elector import Elector, ElectorState
from leasekeeper.usecases.split_brain_detector import SplitBrainDetector, SplitBrainStatus

__all__ = [
    "Elector",
    "ElectorState",
    "SplitBrainDetector",
    "SplitBrainStatus",
    "ConfigParser",
]
