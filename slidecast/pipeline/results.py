"""
Tagged step results for the render pipeline.

Every step of a render run reports exactly one of ``Ok``, ``SoftFail`` or
``Fatal``. The orchestrator branches on the type alone: a soft failure lets the
run continue in a degraded mode, a fatal one ends the run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Ok:
    step: str
    value: Any = None


@dataclass(frozen=True)
class SoftFail:
    step: str
    error: BaseException

    @property
    def message(self) -> str:
        return _describe(self.error)


@dataclass(frozen=True)
class Fatal:
    step: str
    error: BaseException

    @property
    def message(self) -> str:
        return _describe(self.error)


StepResult = Ok | SoftFail | Fatal


def _describe(error: BaseException) -> str:
    text = str(error).strip()
    return text or type(error).__name__
