"""
Resilient call wrapper for external services.

Every classification and generation request goes through `resilient_call`,
which bounds the wait with a timeout and substitutes a fallback value when
the call fails, so an interaction can never block on a slow or broken
service.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, Type, TypeVar, Union

from interview_engine.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CallOutcome(Generic[T]):
    """Result of a resilient call."""
    value: T
    degraded: bool = False
    error: Optional[ExternalServiceError] = None


async def resilient_call(
    operation: Callable[[], Awaitable[T]],
    *,
    timeout: float,
    fallback: Union[T, Callable[[], T]],
    error_cls: Type[ExternalServiceError] = ExternalServiceError,
    description: str = "external call",
) -> CallOutcome[T]:
    """
    Await `operation()` with a bounded timeout.

    Args:
        operation: Zero-argument callable returning the awaitable to run
        timeout: Maximum seconds to wait
        fallback: Value (or zero-argument factory) returned on failure
        error_cls: Error type recorded on the outcome when the call fails
        description: Short label used in log messages

    Returns:
        CallOutcome with the result, or the fallback and the wrapped error
    """
    try:
        value = await asyncio.wait_for(operation(), timeout=timeout)
        return CallOutcome(value=value)
    except asyncio.TimeoutError as e:
        error = error_cls(f"{description} timed out after {timeout:.1f}s", cause=e)
    except ExternalServiceError as e:
        error = e if isinstance(e, error_cls) else error_cls(str(e), cause=e)
    except Exception as e:
        error = error_cls(f"{description} failed: {e}", cause=e)

    logger.warning(f"{description} degraded to fallback: {error}")
    value = fallback() if callable(fallback) else fallback
    return CallOutcome(value=value, degraded=True, error=error)
