"""Configuration module for the front controller.

This module provides the ApplicationConfig class that drives the dispatch loop,
the fault barrier and the session-backed request store.

Example:
    Basic usage with defaults:

        >>> config = ApplicationConfig()
        >>> config.max_loop
        20

    Enabling the fault barrier:

        >>> config = ApplicationConfig(
        ...     catch_exceptions=True,
        ...     error_presenter="Error",
        ... )

    Loading from environment:

        >>> import os
        >>> os.environ['FRONT_CONTROLLER_CATCH_EXCEPTIONS'] = 'true'
        >>> os.environ['FRONT_CONTROLLER_ERROR_PRESENTER'] = 'Error'
        >>> config = ApplicationConfig.from_env()
"""

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator

TRUTHY_VALUES = {"1", "true", "yes", "on"}


class ApplicationConfig(BaseModel):
    """Configuration for a front controller application.

    Attributes:
        max_loop: Maximum number of requests processed during one request
            lifecycle, forwards included. Processing request ``max_loop + 1``
            fails with LoopOverflowError. Must be between 1 and 1000.
        catch_exceptions: Whether unhandled failures are rerouted to the
            error presenter (the fault barrier). Default is False.
        error_presenter: Name of the presenter that renders failures. The
            fault barrier only engages when this is set. It is also never
            reachable directly from the outside.
        request_expiration_seconds: Default lifetime of a stored request.
            Must be between 1 and 604800 (7 days). Default is 600 (10 minutes).
        request_token_length: Length of generated request tokens (4-64).
        session_namespace: Session section that holds stored requests.

    Note:
        This class is immutable (frozen=True). Create a new instance if you
        need different settings.
    """

    max_loop: int = Field(
        default=20,
        description="Maximum number of requests processed in one lifecycle (1-1000)",
    )
    catch_exceptions: bool = Field(
        default=False,
        description="Reroute unhandled failures to the error presenter",
    )
    error_presenter: str | None = Field(
        default=None,
        description="Name of the error presenter",
    )
    request_expiration_seconds: int = Field(
        default=600,
        description="Default lifetime of a stored request in seconds (1-604800)",
    )
    request_token_length: int = Field(
        default=5,
        description="Length of generated request tokens (4-64)",
    )
    session_namespace: str = Field(
        default="front_controller/requests",
        description="Session section holding stored requests",
    )

    model_config = {"frozen": True}

    @field_validator("max_loop")
    @classmethod
    def validate_max_loop(cls, v: int) -> int:
        """Validate the loop limit is within acceptable range.

        Raises:
            ValueError: If the limit is not between 1 and 1000.
        """
        if not (1 <= v <= 1000):
            raise ValueError(f"max_loop must be between 1 and 1000, got {v}")
        return v

    @field_validator("error_presenter", mode="before")
    @classmethod
    def validate_error_presenter(cls, v: Any) -> str | None:
        """Normalize the error presenter name.

        Blank names are treated as "no error presenter".

        Example:
            >>> ApplicationConfig(error_presenter="  ").error_presenter is None
            True
        """
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("error_presenter must be a string")
        v = v.strip()
        return v or None

    @field_validator("request_expiration_seconds")
    @classmethod
    def validate_request_expiration_seconds(cls, v: int) -> int:
        """Validate the stored request lifetime.

        Raises:
            ValueError: If the lifetime is not between 1 and 604800 (7 days).
        """
        if not (1 <= v <= 604800):
            raise ValueError(
                f"request_expiration_seconds must be between 1 and 604800 (7 days), got {v}"
            )
        return v

    @field_validator("request_token_length")
    @classmethod
    def validate_request_token_length(cls, v: int) -> int:
        if not (4 <= v <= 64):
            raise ValueError(f"request_token_length must be between 4 and 64, got {v}")
        return v

    @field_validator("session_namespace")
    @classmethod
    def validate_session_namespace(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("session_namespace cannot be empty")
        return v

    @property
    def fault_barrier_enabled(self) -> bool:
        """True when failures are rerouted to the error presenter."""
        return self.catch_exceptions and self.error_presenter is not None

    @classmethod
    def from_env(cls, prefix: str = "FRONT_CONTROLLER_") -> "ApplicationConfig":
        """Create configuration from environment variables.

        Variable names are uppercase field names with the prefix, for example
        ``FRONT_CONTROLLER_MAX_LOOP``.

        Args:
            prefix: Prefix for environment variable names.

        Returns:
            ApplicationConfig populated from environment variables. Missing
            variables use the default values defined in the model.
        """
        config_dict: dict[str, Any] = {}

        field_types = {
            "max_loop": int,
            "catch_exceptions": bool,
            "error_presenter": str,
            "request_expiration_seconds": int,
            "request_token_length": int,
            "session_namespace": str,
        }

        for field_name, field_type in field_types.items():
            env_value = os.environ.get(f"{prefix}{field_name.upper()}")
            if env_value is None:
                continue

            if field_type is int:
                config_dict[field_name] = int(env_value)
            elif field_type is bool:
                config_dict[field_name] = env_value.strip().lower() in TRUTHY_VALUES
            else:
                config_dict[field_name] = env_value

        return cls(**config_dict)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "ApplicationConfig":
        """Create configuration from a dictionary.

        Raises:
            ValidationError: If the dictionary contains invalid values.
        """
        return cls(**config_dict)
