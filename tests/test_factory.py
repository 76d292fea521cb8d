"""Tests for profile resolution and adapter/reconciler construction."""

import os
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from chschema.adapters.clickhouse import AsyncClickHouseAdapter
from chschema.config.models import DatabaseConfig, DatabaseProfile, ReconcileSettings
from chschema.factory import (
    ProfileNotFoundError,
    build_reconciler,
    clear_profile_lock,
    connect,
    create_adapter,
    get_active_profile,
    get_active_profile_name,
    get_adapter,
    read_profile_lock,
    write_profile_lock,
)
from chschema.schema.reconciler import TableReconciler


@pytest.fixture
def lock_file(tmp_path: Path):
    lock = tmp_path / ".ch-profile"
    with patch("chschema.factory._PROFILE_LOCK_FILE", lock):
        yield lock


@pytest.fixture
def clean_env():
    env = {k: v for k, v in os.environ.items() if not k.endswith("CH_PROFILE")}
    with patch.dict(os.environ, env, clear=True):
        yield


CONFIG = DatabaseConfig(
    profiles={
        "local": DatabaseProfile(),
        "prod": DatabaseProfile(host="ch.internal", port=8443, db_password="pw", secure=True),
    },
)


class TestProfileLock:
    """Lock file round trip."""

    def test_write_read_clear(self, lock_file: Path) -> None:
        assert read_profile_lock() is None
        write_profile_lock("local")
        assert read_profile_lock() == "local"
        clear_profile_lock()
        assert read_profile_lock() is None
        assert not lock_file.exists()


class TestActiveProfile:
    """Profile resolution priority."""

    def test_env_var_wins(self, lock_file: Path, clean_env) -> None:
        write_profile_lock("local")
        with patch.dict(os.environ, {"CH_PROFILE": "prod"}):
            assert get_active_profile_name() == "prod"

    def test_env_prefix(self, lock_file: Path, clean_env) -> None:
        with patch.dict(os.environ, {"APP_CH_PROFILE": "prod"}):
            assert get_active_profile_name(env_prefix="APP_") == "prod"

    def test_lock_file_fallback(self, lock_file: Path, clean_env) -> None:
        write_profile_lock("local")
        assert get_active_profile_name() == "local"

    def test_not_configured(self, lock_file: Path, clean_env) -> None:
        with pytest.raises(ProfileNotFoundError):
            get_active_profile_name()

    def test_unknown_profile(self, lock_file: Path, clean_env) -> None:
        write_profile_lock("staging")
        with pytest.raises(KeyError, match="staging"):
            get_active_profile(config=CONFIG)


class TestAdapterFactory:
    """Adapters are built from profiles."""

    def test_create_adapter_forwards_profile(self) -> None:
        with patch.object(AsyncClickHouseAdapter, "__init__", return_value=None) as mock_init:
            create_adapter(CONFIG.profiles["prod"])

        mock_init.assert_called_once_with(
            host="ch.internal",
            port=8443,
            username="default",
            password="pw",
            database="default",
            secure=True,
        )

    @pytest.mark.asyncio
    async def test_get_adapter_named_profile(self) -> None:
        adapter = await get_adapter(profile_name="local", config=CONFIG)
        assert isinstance(adapter, AsyncClickHouseAdapter)

    @pytest.mark.asyncio
    async def test_get_adapter_no_caching(self) -> None:
        first = await get_adapter(profile_name="local", config=CONFIG)
        second = await get_adapter(profile_name="local", config=CONFIG)
        assert first is not second

    @pytest.mark.asyncio
    async def test_get_adapter_without_profile(self, lock_file: Path, clean_env) -> None:
        with pytest.raises(ProfileNotFoundError):
            await get_adapter(config=CONFIG)


class TestBuildReconciler:
    """Reconcile settings flow into the reconciler."""

    def test_defaults(self) -> None:
        reconciler = build_reconciler(AsyncMock())
        assert isinstance(reconciler, TableReconciler)
        assert reconciler.default_database == "default"
        assert reconciler.comparator.is_ordered_storage("MergeTree")

    def test_custom_settings(self) -> None:
        settings = ReconcileSettings(default_database="analytics", ordered_engine_prefixes=["Log"])

        reconciler = build_reconciler(AsyncMock(), settings)

        assert reconciler.default_database == "analytics"
        assert reconciler.comparator.is_ordered_storage("Log")
        assert not reconciler.comparator.is_ordered_storage("MergeTree")


class TestConnect:
    """connect() pings the profile and writes the lock file on success."""

    @pytest.mark.asyncio
    async def test_success_writes_lock(self, lock_file: Path) -> None:
        with patch("chschema.factory.load_db_config", return_value=CONFIG), \
             patch.object(AsyncClickHouseAdapter, "ping", AsyncMock(return_value=True)), \
             patch.object(AsyncClickHouseAdapter, "close", AsyncMock()) as mock_close:
            result = await connect("local")

        assert result.success
        assert result.profile_name == "local"
        assert read_profile_lock() == "local"
        mock_close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unreachable(self, lock_file: Path) -> None:
        with patch("chschema.factory.load_db_config", return_value=CONFIG), \
             patch.object(AsyncClickHouseAdapter, "ping", AsyncMock(side_effect=OSError("refused"))), \
             patch.object(AsyncClickHouseAdapter, "close", AsyncMock()):
            result = await connect("prod")

        assert not result.success
        assert "ch.internal:8443" in result.error
        assert read_profile_lock() is None

    @pytest.mark.asyncio
    async def test_unknown_profile(self, lock_file: Path) -> None:
        with patch("chschema.factory.load_db_config", return_value=CONFIG):
            result = await connect("staging")

        assert not result.success
        assert "Available: local, prod" in result.error

    @pytest.mark.asyncio
    async def test_no_profile(self, lock_file: Path, clean_env) -> None:
        result = await connect()
        assert not result.success
        assert "No database profile configured" in result.error
