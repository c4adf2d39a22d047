"""
Resilient Call Tests.
"""
import asyncio

import pytest

from interview_engine.core.exceptions import (
    ClassificationServiceError,
    ExternalServiceError,
    GenerationServiceError,
)
from interview_engine.core.resilience import resilient_call


class TestResilientCall:
    """Test timeout and fallback handling."""

    @pytest.mark.asyncio
    async def test_success(self):
        async def operation():
            return "ok"

        outcome = await resilient_call(operation, timeout=1.0, fallback="fallback")

        assert outcome.value == "ok"
        assert outcome.degraded is False
        assert outcome.error is None

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def operation():
            await asyncio.sleep(1)
            return "late"

        outcome = await resilient_call(
            operation, timeout=0.01, fallback="fallback", error_cls=ClassificationServiceError
        )

        assert outcome.value == "fallback"
        assert outcome.degraded is True
        assert isinstance(outcome.error, ClassificationServiceError)
        assert "timed out" in str(outcome.error)

    @pytest.mark.asyncio
    async def test_service_error_kept(self):
        error = GenerationServiceError("generator offline")

        async def operation():
            raise error

        outcome = await resilient_call(
            operation, timeout=1.0, fallback=None, error_cls=GenerationServiceError
        )

        assert outcome.degraded is True
        assert outcome.error is error

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self):
        async def operation():
            raise KeyError("message")

        outcome = await resilient_call(
            operation, timeout=1.0, fallback=None, error_cls=GenerationServiceError
        )

        assert isinstance(outcome.error, GenerationServiceError)
        assert isinstance(outcome.error.cause, KeyError)
        assert outcome.error.service == "generation"

    @pytest.mark.asyncio
    async def test_other_service_error_rewrapped(self):
        async def operation():
            raise ExternalServiceError("generic failure")

        outcome = await resilient_call(
            operation, timeout=1.0, fallback=None, error_cls=ClassificationServiceError
        )

        assert isinstance(outcome.error, ClassificationServiceError)

    @pytest.mark.asyncio
    async def test_callable_fallback(self):
        calls = []

        def fallback():
            calls.append(1)
            return {"intent": "normal"}

        async def operation():
            raise RuntimeError("down")

        outcome = await resilient_call(operation, timeout=1.0, fallback=fallback)

        assert outcome.value == {"intent": "normal"}
        assert calls == [1]
