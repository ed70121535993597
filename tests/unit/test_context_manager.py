"""Unit tests for the configuration context."""

import asyncio
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.storefront.runtime.config.config_data import ConfigData
from src.storefront.runtime.context import AppContext, get_config, get_context, with_context


class TestContextManager:
    """Test the context manager functionality."""

    def test_default_context_available(self):
        """Should have a default context available."""
        context = get_context()
        config = get_config()

        assert isinstance(context, AppContext)
        assert isinstance(config, ConfigData)
        assert context.config is config

    def test_with_context_override_single_level(self):
        """Should override config for the duration of the context manager."""
        original_config = get_config()
        original_url = original_config.database.url

        test_config = ConfigData()
        test_config.database.url = "sqlite:///override.db"

        with with_context(test_config):
            override_config = get_config()
            assert override_config.database.url == "sqlite:///override.db"
            assert override_config is not original_config

        after_config = get_config()
        assert after_config.database.url == original_url
        assert after_config is original_config

    def test_with_context_nested_overrides(self):
        """Should handle nested context overrides correctly."""
        original_config = get_config()

        level1_config = ConfigData()
        level1_config.remote.base_url = "https://level1.test"
        level1_config.app.environment = "production"

        with with_context(level1_config):
            assert get_config().remote.base_url == "https://level1.test"

            level2_config = ConfigData()
            level2_config.remote.base_url = "https://level2.test"
            level2_config.logging.level = "DEBUG"

            with with_context(level2_config):
                level2 = get_config()
                assert level2.remote.base_url == "https://level2.test"
                assert level2.logging.level == "DEBUG"
                assert level2.app.environment == "production"

            back_to_level1 = get_config()
            assert back_to_level1.remote.base_url == "https://level1.test"
            assert back_to_level1.logging.level == original_config.logging.level

        assert get_config() is original_config

    def test_partial_override_keeps_sibling_fields(self):
        """Setting one field of a section keeps the section's other values."""
        parent = ConfigData()
        parent.remote.poll_interval_seconds = 3
        parent.remote.active_only = True

        with with_context(parent):
            child = ConfigData()
            child.remote.poll_interval_seconds = 1

            with with_context(child):
                remote = get_config().remote
                assert remote.poll_interval_seconds == 1
                assert remote.active_only is True

    def test_with_context_no_override(self):
        """Should work without any override (current context)."""
        original_config = get_config()

        with with_context():
            assert get_config() is original_config

    def test_rejects_other_types(self):
        with pytest.raises(ValueError):
            with with_context({"database": {"url": "sqlite://"}}):
                pass

    def test_exception_handling_in_context(self):
        """Should properly restore context even when exceptions occur."""
        original_config = get_config()

        test_config = ConfigData()
        test_config.logging.level = "ERROR"

        with pytest.raises(RuntimeError):
            with with_context(test_config):
                assert get_config().logging.level == "ERROR"
                raise RuntimeError("boom")

        assert get_config() is original_config


class TestAsyncContextManager:
    """Test context manager behavior in async contexts."""

    @pytest.mark.asyncio
    async def test_async_context_isolation(self):
        """Should maintain context isolation in async functions."""
        original_config = get_config()

        async def async_worker(worker_id: int) -> str:
            worker_config = ConfigData()
            worker_config.remote.base_url = f"https://worker{worker_id}.test"

            with with_context(worker_config):
                await asyncio.sleep(0.01)
                return get_config().remote.base_url

        results = await asyncio.gather(*(async_worker(i) for i in range(5)))

        assert results == [f"https://worker{i}.test" for i in range(5)]
        assert get_config() is original_config


class TestThreadSafety:
    """Test context manager behavior across threads."""

    def test_thread_isolation(self):
        """Should maintain context isolation across threads."""
        original_config = get_config()
        results = {}

        def thread_worker(worker_id: int) -> None:
            worker_config = ConfigData()
            worker_config.database.url = f"sqlite:///thread{worker_id}.db"

            with with_context(worker_config):
                time.sleep(0.01)
                results[worker_id] = get_config().database.url

        with ThreadPoolExecutor(max_workers=5) as executor:
            for future in [executor.submit(thread_worker, i) for i in range(1, 6)]:
                future.result()

        for i in range(1, 6):
            assert results[i] == f"sqlite:///thread{i}.db"
        assert get_config() is original_config
