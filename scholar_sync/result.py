"""Tagged stage results.

The pipeline never lets a stage exception unwind through it. Each stage call
is captured into ``Ok(value)`` or ``Err(kind, message)`` and the pipeline
branches on the tag.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

from .errors import ScholarSyncError

logger = logging.getLogger(__name__)

T = TypeVar("T")

GENERIC_FAILURE = "An unexpected error occurred during analysis."


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: str
    message: str


StageResult = Union[Ok[T], Err]


async def capture(step: str, func: Callable[..., Awaitable[T]], *args: Any) -> StageResult:
    """Call and await one stage, tagging its outcome."""
    try:
        return Ok(await func(*args))
    except ScholarSyncError as exc:
        logger.info("stage %s failed: %s", step, exc)
        return Err(exc.kind, str(exc) or GENERIC_FAILURE)
    except Exception as exc:
        logger.exception("stage %s raised an unexpected error", step)
        return Err(step, str(exc) or GENERIC_FAILURE)
