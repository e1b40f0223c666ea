"""
tbv ("trust but verify") checks that a package published to a registry was
packed from the source-control commit it claims.
"""

from .config import Settings
from .engine import PipelineEngine
from .models import ProgressState, Step, StepStatus
from .verification import Verifier, verify

__all__ = [
    "PipelineEngine",
    "ProgressState",
    "Settings",
    "Step",
    "StepStatus",
    "Verifier",
    "verify",
]
