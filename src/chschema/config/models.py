"""Pydantic models for connection profiles and reconciliation settings."""

from pydantic import BaseModel, Field


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """ClickHouse connection profile from db.toml."""

    host: str = "localhost"
    port: int = 8123
    username: str = "default"
    password: str = ""
    database: str = "default"
    secure: bool = False
    description: str = ""
    db_password: str | None = None  # Overrides password when set

    @property
    def resolved_password(self) -> str:
        """Password to connect with (``db_password`` takes precedence)."""
        return self.db_password if self.db_password is not None else self.password


class ReconcileSettings(BaseModel):
    """Reconciliation settings from the ``[reconcile]`` table."""

    default_database: str = "default"
    ordered_engine_prefixes: list[str] | None = None  # None = built-in family


class DatabaseConfig(BaseModel):
    """Complete configuration from db.toml."""

    profiles: dict[str, DatabaseProfile]
    reconcile: ReconcileSettings = Field(default_factory=ReconcileSettings)


# ============================================================================
# Connection Result
# ============================================================================


class ConnectionResult(BaseModel):
    """Result of connect().

    Example:
        >>> result = ConnectionResult(success=True, profile_name="dev")
        >>> result.success
        True
    """

    success: bool
    profile_name: str | None = None
    error: str | None = None
