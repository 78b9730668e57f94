"""
Pipeline package for SlideCast.

The composition orchestrator and the tagged results of its render steps.
"""

from .orchestrator import CompositionOrchestrator
from .results import Fatal, Ok, SoftFail, StepResult

__all__ = ["CompositionOrchestrator", "Fatal", "Ok", "SoftFail", "StepResult"]
