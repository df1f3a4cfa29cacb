"""Native capability executor with validation, timeouts, and audit logging."""

import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import Draft7Validator

from swarm_agent.core.config import Settings, get_settings
from swarm_agent.core.logging import get_logger
from swarm_agent.tools.base import (
    Capability,
    ToolExecutionError,
    ToolIOError,
    ToolNotFoundError,
    ToolRuntimeError,
    ToolTimeoutError,
    ToolValidationError,
)

logger = get_logger("tools.executor")


class CapabilityExecutor:
    """Registry and runner for native capabilities.

    Every call is validated against the capability's JSON Schema and then
    run on a bounded worker pool with a timeout, so one slow filesystem or
    network call cannot stall the caller forever. A call that times out
    keeps its worker thread until the underlying IO returns; the caller is
    released immediately with ToolTimeoutError.
    """

    def __init__(self, settings: Settings | None = None):
        """Initialize executor.

        Args:
            settings: Runtime settings (uses global if not provided)
        """
        self._settings = settings
        self._capabilities: dict[str, Capability] = {}
        self._validators: dict[str, Draft7Validator] = {}
        self._pool: ThreadPoolExecutor | None = None

    @property
    def settings(self) -> Settings:
        """Get settings instance."""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def pool(self) -> ThreadPoolExecutor:
        """Worker pool, created on first use."""
        if self._pool is None:
            self._pool = ThreadPoolExecutor(
                max_workers=self.settings.capability_workers,
                thread_name_prefix="capability",
            )
        return self._pool

    def register(self, capability: Capability) -> None:
        """Register a native capability.

        Raises:
            ValueError: If the name is taken or the input schema is invalid
        """
        name = capability.name

        if name in self._capabilities:
            raise ValueError(f"Capability '{name}' is already registered")

        try:
            Draft7Validator.check_schema(capability.input_schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Capability '{name}' has invalid input schema: {e.message}")

        self._validators[name] = Draft7Validator(capability.input_schema)
        self._capabilities[name] = capability

        logger.debug(f"Registered capability: {name}")

    def get(self, name: str) -> Capability | None:
        """Get a capability by name."""
        return self._capabilities.get(name)

    def names(self) -> list[str]:
        """List registered capability names."""
        return sorted(self._capabilities)

    def validate_path(self, path: str | Path) -> Path:
        """Resolve a path for file capabilities.

        When ``workspace_root`` is configured the path is resolved inside it
        and may not escape it; otherwise it is resolved as given.

        Raises:
            ToolIOError: If the path escapes the workspace
        """
        workspace = self.settings.workspace_root
        if workspace is None:
            return Path(path).expanduser().resolve()

        workspace = workspace.resolve()
        resolved = (workspace / path).resolve()
        if not resolved.is_relative_to(workspace):
            raise ToolIOError(f"Path '{path}' escapes workspace directory {workspace}")
        return resolved

    def validate_input(self, name: str, input_data: dict[str, Any]) -> None:
        """Validate input against a capability's JSON Schema.

        Raises:
            ToolNotFoundError: If capability not found
            ToolValidationError: If validation fails
        """
        validator = self._validators.get(name)
        if validator is None:
            raise ToolNotFoundError(f"Capability '{name}' not found")

        errors: list[str] = []
        for error in validator.iter_errors(input_data):
            path = ".".join(str(p) for p in error.absolute_path) or "(root)"
            errors.append(f"{path}: {error.message}")

        if errors:
            raise ToolValidationError(
                message=f"Input validation failed with {len(errors)} error(s)",
                tool_name=name,
                errors=errors,
            )

    def call(self, name: str, *args: Any) -> Any:
        """Run a capability with positional arguments.

        Returns:
            The capability's result

        Raises:
            ToolNotFoundError: If capability not found
            ToolValidationError: If arguments fail validation
            ToolTimeoutError: If the call exceeds its timeout
            ToolRuntimeError: Whatever the capability itself raises
        """
        capability = self.get(name)
        if capability is None:
            raise ToolNotFoundError(f"Capability '{name}' not found")

        input_data = capability.bind_arguments(args)
        self.validate_input(name, input_data)

        timeout = min(capability.definition.timeout_seconds, self.settings.capability_timeout)
        start_time = time.perf_counter()
        future = self.pool.submit(capability.execute, **input_data)

        try:
            result = future.result(timeout=timeout)
        except FutureTimeoutError:
            logger.error(f"Capability {name} timed out after {timeout}s")
            raise ToolTimeoutError(f"timed out after {timeout}s", tool_name=name)
        except ToolRuntimeError as e:
            logger.warning(f"Capability {name} failed: {e}")
            raise
        except Exception as e:
            logger.exception(f"Unexpected error in capability {name}")
            raise ToolExecutionError(
                message=f"Unexpected error: {type(e).__name__}: {e}",
                tool_name=name,
            ) from e

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(f"Capability {name} completed in {duration_ms}ms")
        return result

    def bindings(self) -> dict[str, Callable[..., Any]]:
        """Callables to bind into a tool namespace, keyed by capability name."""
        return {name: self._binding(name) for name in self._capabilities}

    def _binding(self, name: str) -> Callable[..., Any]:
        def invoke(*args: Any) -> Any:
            return self.call(name, *args)

        invoke.__name__ = name
        invoke.__qualname__ = name
        invoke.__doc__ = self._capabilities[name].description
        return invoke

    def shutdown(self) -> None:
        """Stop accepting work; running calls are not waited for."""
        if self._pool is not None:
            self._pool.shutdown(wait=False, cancel_futures=True)
            self._pool = None

    def __len__(self) -> int:
        return len(self._capabilities)

    def __contains__(self, name: str) -> bool:
        return name in self._capabilities
