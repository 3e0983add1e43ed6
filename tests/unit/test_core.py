import asyncio
import time
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI

from cinemood.core.cache import InMemoryCache
from cinemood.core.circuit_breaker import CircuitBreaker, CircuitState
from cinemood.core.exceptions import (
    AmbiguousInputError,
    CircuitBreakerOpenError,
    ConfigurationError,
    ParseError,
)
from cinemood.core.telemetry import setup_telemetry


async def _fail():
    raise RuntimeError("Error")


class TestCircuitBreaker:
    def test_initial_state(self):
        cb = CircuitBreaker("test", failure_threshold=2)
        assert cb.state == CircuitState.CLOSED
        assert cb.name == "test"

    @pytest.mark.asyncio
    async def test_successful_call(self):
        cb = CircuitBreaker("test")
        mock_func = AsyncMock(return_value="success")

        result = await cb.call(mock_func)

        assert result == "success"
        assert cb.state == CircuitState.CLOSED
        mock_func.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_call_opens_after_threshold(self):
        cb = CircuitBreaker("test", failure_threshold=2)

        # 1st failure
        with pytest.raises(RuntimeError):
            await cb.call(_fail)
        assert cb.state == CircuitState.CLOSED

        # 2nd failure -> Open
        with pytest.raises(RuntimeError):
            await cb.call(_fail)
        assert cb.failure_count == 2
        assert cb.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_open_circuit_blocks_calls(self):
        cb = CircuitBreaker("test", failure_threshold=1, recovery_timeout_sec=60)
        with pytest.raises(RuntimeError):
            await cb.call(_fail)

        never_called = AsyncMock(return_value="should not run")
        with pytest.raises(CircuitBreakerOpenError):
            await cb.call(never_called)
        never_called.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success_resets_failure_count(self):
        cb = CircuitBreaker("test", failure_threshold=3)
        with pytest.raises(RuntimeError):
            await cb.call(_fail)
        assert cb.failure_count == 1

        await cb.call(AsyncMock(return_value="ok"))
        assert cb.failure_count == 0

    @pytest.mark.asyncio
    async def test_recovery_half_open(self):
        cb = CircuitBreaker("test", failure_threshold=1, recovery_timeout_sec=0.1)
        with pytest.raises(RuntimeError):
            await cb.call(_fail)

        await asyncio.sleep(0.15)  # Wait for timeout

        # Probe succeeds -> CLOSED
        res = await cb.call(AsyncMock(return_value="recovered"))
        assert res == "recovered"
        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 0

    @pytest.mark.asyncio
    async def test_failed_probe_reopens(self):
        cb = CircuitBreaker("test", failure_threshold=3, recovery_timeout_sec=0.1)
        for _ in range(3):
            with pytest.raises(RuntimeError):
                await cb.call(_fail)
        assert cb.state == CircuitState.OPEN

        await asyncio.sleep(0.15)
        with pytest.raises(RuntimeError):
            await cb.call(_fail)
        assert cb.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_manual_reset(self):
        cb = CircuitBreaker("test", failure_threshold=1)
        with pytest.raises(RuntimeError):
            await cb.call(_fail)
        assert cb.state == CircuitState.OPEN

        cb.reset()
        assert cb.state == CircuitState.CLOSED


class TestTelemetry:
    @patch("cinemood.core.telemetry.get_settings")
    @patch("cinemood.core.telemetry.Instrumentator")
    def test_setup_telemetry_prometheus_enabled(self, mock_instrumentator, mock_get_settings):
        mock_settings = MagicMock()
        mock_settings.ENABLE_PROMETHEUS = True
        mock_settings.ENABLE_OTEL = False
        mock_get_settings.return_value = mock_settings

        app = FastAPI()
        setup_telemetry(app)

        mock_instrumentator.assert_called_once()
        mock_instrumentator.return_value.instrument.assert_called_once_with(app)

    @patch("cinemood.core.telemetry.get_settings")
    @patch("cinemood.core.telemetry.OTLPSpanExporter")
    @patch("cinemood.core.telemetry.BatchSpanProcessor")
    @patch("cinemood.core.telemetry.FastAPIInstrumentor")
    def test_setup_telemetry_otel_enabled(
        self, mock_fastapi_instr, mock_processor, mock_exporter, mock_get_settings
    ):
        mock_settings = MagicMock()
        mock_settings.ENABLE_PROMETHEUS = False
        mock_settings.ENABLE_OTEL = True
        mock_settings.APP_NAME = "test"
        mock_settings.APP_VERSION = "1.0"
        mock_settings.DEBUG = False
        mock_get_settings.return_value = mock_settings

        app = FastAPI()
        setup_telemetry(app)

        mock_fastapi_instr.instrument_app.assert_called_once()
        mock_processor.assert_called_once()

    @patch("cinemood.core.telemetry.get_settings")
    @patch("cinemood.core.telemetry.Instrumentator")
    def test_setup_telemetry_disabled(self, mock_instrumentator, mock_get_settings):
        mock_settings = MagicMock()
        mock_settings.ENABLE_PROMETHEUS = False
        mock_settings.ENABLE_OTEL = False
        mock_get_settings.return_value = mock_settings

        setup_telemetry(FastAPI())

        mock_instrumentator.assert_not_called()


class TestInMemoryCache:
    def test_get_set(self):
        cache = InMemoryCache()
        cache.set("key", "value")
        assert cache.get("key") == "value"
        assert cache.get("missing") is None

    def test_expiration(self):
        cache = InMemoryCache(default_ttl_seconds=0.1)
        cache.set("key", "value")
        assert cache.get("key") == "value"

        time.sleep(0.15)
        assert cache.get("key") is None
        # Expired entry is evicted on read
        assert cache.size() == 0

    def test_explicit_ttl(self):
        cache = InMemoryCache()
        cache.set("short", "val", ttl_seconds=0.1)
        cache.set("long", "val", ttl_seconds=10)

        time.sleep(0.15)
        assert cache.get("short") is None
        assert cache.get("long") == "val"

    def test_clear(self):
        cache = InMemoryCache()
        cache.set("k1", "v1")
        cache.set("k2", "v2")

        cache.clear()
        assert cache.size() == 0
        assert cache.get("k2") is None

    @pytest.mark.asyncio
    async def test_get_or_fetch(self):
        cache = InMemoryCache()
        factory = AsyncMock(return_value="computed")

        # Miss -> factory
        assert await cache.get_or_fetch(42, factory) == "computed"
        factory.assert_awaited_once()

        # Hit -> no factory
        assert await cache.get_or_fetch(42, factory) == "computed"
        factory.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_or_fetch_does_not_cache_errors(self):
        cache = InMemoryCache()
        factory = AsyncMock(side_effect=[RuntimeError("upstream"), "second"])

        with pytest.raises(RuntimeError):
            await cache.get_or_fetch("k", factory)
        assert cache.size() == 0

        assert await cache.get_or_fetch("k", factory) == "second"


class TestExceptions:
    def test_parse_error_payload(self):
        error = ParseError("no json", raw="x" * 500)
        body = error.to_dict()["error"]
        assert body["code"] == "PARSE_ERROR"
        assert len(body["details"]["raw_excerpt"]) == 200
        assert error.status_code == 422

    def test_ambiguous_error_payload(self):
        error = AmbiguousInputError(parsed={"ambiguous": True})
        assert error.status_code == 400
        assert error.to_dict()["error"]["details"]["parsed"] == {"ambiguous": True}

    def test_configuration_error_lists_missing(self):
        error = ConfigurationError(["TMDB_API_KEY", "LLM_API_KEY"])
        assert error.missing == ["TMDB_API_KEY", "LLM_API_KEY"]
        assert "TMDB_API_KEY" in error.message
