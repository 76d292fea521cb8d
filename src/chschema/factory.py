"""Adapter and reconciler factory.

Resolves the active connection profile (``{prefix}CH_PROFILE`` env var,
then the ``.ch-profile`` lock file written by a successful connect),
and builds ``AsyncClickHouseAdapter`` and ``TableReconciler`` instances
from db.toml.
"""

import logging
import os
from pathlib import Path

from chschema.adapters.clickhouse import AsyncClickHouseAdapter
from chschema.config.loader import load_db_config
from chschema.config.models import (
    ConnectionResult,
    DatabaseConfig,
    DatabaseProfile,
    ReconcileSettings,
)
from chschema.schema.comparator import SchemaComparator
from chschema.schema.reconciler import TableReconciler

logger = logging.getLogger(__name__)

# Profile lock file path
_PROFILE_LOCK_FILE = Path.cwd() / ".ch-profile"


# ============================================================================
# Profile Lock File Operations
# ============================================================================


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured."""

    pass


def read_profile_lock() -> str | None:
    """Read profile name from lock file.

    Returns:
        Profile name if lock file exists, None otherwise
    """
    if _PROFILE_LOCK_FILE.exists():
        return _PROFILE_LOCK_FILE.read_text().strip()
    return None


def write_profile_lock(profile_name: str) -> None:
    """Write profile name to lock file.

    Only call this after a successful connect.

    Args:
        profile_name: Name of the reachable profile
    """
    _PROFILE_LOCK_FILE.write_text(profile_name)


def clear_profile_lock() -> None:
    """Remove profile lock file."""
    if _PROFILE_LOCK_FILE.exists():
        _PROFILE_LOCK_FILE.unlink()


def get_active_profile_name(env_prefix: str = "") -> str:
    """Get active profile name from env var or lock file.

    Priority:
    1. ``{env_prefix}CH_PROFILE`` env var
    2. .ch-profile file (profile from previous connect)
    3. Raise ProfileNotFoundError

    Returns:
        Profile name

    Raises:
        ProfileNotFoundError: If no profile is configured
    """
    env_profile = os.environ.get(f"{env_prefix}CH_PROFILE")
    if env_profile:
        return env_profile

    lock_profile = read_profile_lock()
    if lock_profile:
        return lock_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Run: {env_prefix}CH_PROFILE=<name> chschema connect"
    )


def get_active_profile(
    env_prefix: str = "", config: DatabaseConfig | None = None
) -> tuple[str, DatabaseProfile]:
    """Get active profile name and configuration.

    Returns:
        Tuple of (profile_name, DatabaseProfile)

    Raises:
        ProfileNotFoundError: If no profile configured
        KeyError: If profile not found in db.toml
    """
    profile_name = get_active_profile_name(env_prefix=env_prefix)
    return profile_name, _lookup_profile(profile_name, config or load_db_config())


def _lookup_profile(profile_name: str, config: DatabaseConfig) -> DatabaseProfile:
    if profile_name not in config.profiles:
        raise KeyError(
            f"Profile '{profile_name}' not found in db.toml.\n"
            f"Available profiles: {', '.join(config.profiles.keys())}"
        )
    return config.profiles[profile_name]


# ============================================================================
# Adapter and Reconciler Factories
# ============================================================================


def create_adapter(profile: DatabaseProfile) -> AsyncClickHouseAdapter:
    """Build an adapter from a connection profile."""
    return AsyncClickHouseAdapter(
        host=profile.host,
        port=profile.port,
        username=profile.username,
        password=profile.resolved_password,
        database=profile.database,
        secure=profile.secure,
    )


async def get_adapter(
    profile_name: str | None = None,
    env_prefix: str = "",
    config: DatabaseConfig | None = None,
) -> AsyncClickHouseAdapter:
    """Create an adapter for a profile.

    Each call creates a new adapter; callers own its ``close()``.

    Args:
        profile_name: Profile name from db.toml.  If None, resolves the
            active profile from env var or lock file.
        env_prefix: Prefix for the profile env var.
        config: Pre-loaded config (default: ``load_db_config()``).

    Raises:
        ProfileNotFoundError: If no profile is configured.
        KeyError: If the profile is not in db.toml.
    """
    if profile_name is None:
        profile_name = get_active_profile_name(env_prefix=env_prefix)

    profile = _lookup_profile(profile_name, config or load_db_config())
    return create_adapter(profile)


def build_reconciler(
    adapter: AsyncClickHouseAdapter, settings: ReconcileSettings | None = None
) -> TableReconciler:
    """Build a reconciler over *adapter* using ``[reconcile]`` settings."""
    settings = settings or ReconcileSettings()

    if settings.ordered_engine_prefixes is not None:
        comparator = SchemaComparator(settings.ordered_engine_prefixes)
    else:
        comparator = SchemaComparator()

    return TableReconciler(
        adapter,
        default_database=settings.default_database,
        comparator=comparator,
    )


# ============================================================================
# Connection Check
# ============================================================================


async def connect(
    profile_name: str | None = None,
    env_prefix: str = "",
) -> ConnectionResult:
    """Check that a profile is reachable and remember it.

    On success the profile is written to the lock file so later commands
    use it without ``CH_PROFILE``.

    Returns:
        ConnectionResult with success status

    Example:
        >>> result = await connect("local")
        >>> if result.success:
        ...     print(f"Connected to {result.profile_name}")
    """
    if profile_name is None:
        try:
            profile_name = get_active_profile_name(env_prefix=env_prefix)
        except ProfileNotFoundError as e:
            return ConnectionResult(success=False, error=str(e))

    try:
        config = load_db_config()
        if profile_name not in config.profiles:
            available = ", ".join(config.profiles.keys())
            return ConnectionResult(
                success=False,
                profile_name=profile_name,
                error=f"Profile '{profile_name}' not found. Available: {available}",
            )
        profile = config.profiles[profile_name]
    except FileNotFoundError as e:
        return ConnectionResult(success=False, error=str(e))

    adapter = create_adapter(profile)
    try:
        reachable = await adapter.ping()
    except Exception as e:
        return ConnectionResult(
            success=False,
            profile_name=profile_name,
            error=f"Failed to connect to ClickHouse at {profile.host}:{profile.port}: {e}",
        )
    finally:
        await adapter.close()

    if not reachable:
        return ConnectionResult(
            success=False,
            profile_name=profile_name,
            error=f"ClickHouse at {profile.host}:{profile.port} did not answer ping",
        )

    logger.info(f"Connected to ClickHouse profile {profile_name} ({profile.host}:{profile.port})")
    write_profile_lock(profile_name)
    return ConnectionResult(success=True, profile_name=profile_name)
