"""
densemat Config - Runtime Configuration System

Provides property-based configuration for buffer allocation, entry
formatting and precondition checking. Allows fine-grained control over
behavior without modifying function signatures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Callable, Dict, Any, List
import logging
import os
import threading


logger = logging.getLogger("densemat.config")


# =============================================================================
# Configuration Classes
# =============================================================================

def _env_int(name: str) -> Optional[int]:
    """Read an optional positive integer from the environment."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer")
        return None
    return value if value > 0 else None


@dataclass
class MemoryConfig:
    """Configuration for buffer allocation."""
    alignment: int = 64                          # Memory alignment in bytes
    max_buffer_elements: Optional[int] = None    # Cap on a single buffer (None = unlimited)
    max_live_elements: Optional[int] = None      # Cap on all live buffers together


def _default_memory() -> MemoryConfig:
    """Default memory config, seeded from DENSEMAT_MAX_LIVE_ELEMENTS."""
    return MemoryConfig(max_live_elements=_env_int("DENSEMAT_MAX_LIVE_ELEMENTS"))


@dataclass
class FormatConfig:
    """Configuration for the display width of entries."""
    precision: int = 6             # Digits after the decimal point


@dataclass
class ValidationConfig:
    """Configuration for precondition checks."""
    check_shapes: bool = True      # Raise ShapeMismatchError on incompatible operands


# =============================================================================
# Global Configuration Manager
# =============================================================================

class MatrixConfig:
    """
    Global configuration manager for densemat.

    Provides thread-local configuration with context manager support.
    Configuration can be set globally or locally within a context.

    Example:
        # Global configuration
        densemat.config.format = FormatConfig(precision=3)

        # Local configuration (context manager)
        with densemat.config.local(memory=MemoryConfig(max_live_elements=100)):
            # Allocations beyond 100 live elements fail here
            result = densemat.mult(a, b)
        # Back to global config
    """

    def __init__(self):
        self._global_memory = _default_memory()
        self._global_format = FormatConfig()
        self._global_validation = ValidationConfig()

        # Thread-local storage for context overrides
        self._local = threading.local()

        # Callbacks for config changes
        self._callbacks: Dict[str, List[Callable]] = {
            "memory": [],
            "format": [],
            "validation": [],
        }

    # -------------------------------------------------------------------------
    # Property Accessors (with thread-local override support)
    # -------------------------------------------------------------------------

    @property
    def memory(self) -> MemoryConfig:
        """Get memory configuration."""
        if getattr(self._local, "memory", None) is not None:
            return self._local.memory
        return self._global_memory

    @memory.setter
    def memory(self, value: MemoryConfig):
        """Set global memory configuration."""
        self._global_memory = value
        self._notify("memory", value)

    @property
    def format(self) -> FormatConfig:
        """Get format configuration."""
        if getattr(self._local, "format", None) is not None:
            return self._local.format
        return self._global_format

    @format.setter
    def format(self, value: FormatConfig):
        """Set global format configuration."""
        self._global_format = value
        self._notify("format", value)

    @property
    def validation(self) -> ValidationConfig:
        """Get validation configuration."""
        if getattr(self._local, "validation", None) is not None:
            return self._local.validation
        return self._global_validation

    @validation.setter
    def validation(self, value: ValidationConfig):
        """Set global validation configuration."""
        self._global_validation = value
        self._notify("validation", value)

    # -------------------------------------------------------------------------
    # Convenience Properties
    # -------------------------------------------------------------------------

    @property
    def precision(self) -> int:
        """Digits after the decimal point used for entry widths."""
        return self.format.precision

    @precision.setter
    def precision(self, value: int):
        self._global_format.precision = value

    @property
    def check_shapes(self) -> bool:
        """Whether operand shapes are validated."""
        return self.validation.check_shapes

    @check_shapes.setter
    def check_shapes(self, value: bool):
        self._global_validation.check_shapes = value

    # -------------------------------------------------------------------------
    # Context Manager Support
    # -------------------------------------------------------------------------

    def local(self, **kwargs) -> "_LocalConfigContext":
        """
        Create a local configuration context.

        Args:
            **kwargs: Configuration overrides (memory, format, validation)

        Returns:
            Context manager
        """
        unknown = set(kwargs) - set(self._callbacks)
        if unknown:
            raise TypeError(f"Unknown configuration section(s): {sorted(unknown)}")
        return _LocalConfigContext(self, **kwargs)

    def _set_local(self, **kwargs):
        """Set thread-local configuration."""
        for key, value in kwargs.items():
            if value is not None:
                setattr(self._local, key, value)

    def _clear_local(self, keys: List[str]):
        """Clear thread-local configuration."""
        for key in keys:
            if hasattr(self._local, key):
                setattr(self._local, key, None)

    # -------------------------------------------------------------------------
    # Callback Registration
    # -------------------------------------------------------------------------

    def on_change(self, config_name: str, callback: Callable):
        """
        Register callback for configuration changes.

        Args:
            config_name: Name of config ("memory", "format", "validation")
            callback: Function to call when config changes
        """
        if config_name in self._callbacks:
            self._callbacks[config_name].append(callback)

    def _notify(self, config_name: str, value: Any):
        """Notify callbacks of configuration change."""
        for callback in self._callbacks.get(config_name, []):
            try:
                callback(value)
            except Exception:
                logger.exception(f"Config callback for '{config_name}' failed")

    # -------------------------------------------------------------------------
    # Reset
    # -------------------------------------------------------------------------

    def reset(self):
        """Reset all configurations to defaults (environment seed included)."""
        self._global_memory = _default_memory()
        self._global_format = FormatConfig()
        self._global_validation = ValidationConfig()

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return {
            "memory": {
                "alignment": self.memory.alignment,
                "max_buffer_elements": self.memory.max_buffer_elements,
                "max_live_elements": self.memory.max_live_elements,
            },
            "format": {
                "precision": self.format.precision,
            },
            "validation": {
                "check_shapes": self.validation.check_shapes,
            },
        }

    def __repr__(self) -> str:
        return f"MatrixConfig({self.to_dict()})"


class _LocalConfigContext:
    """Context manager for local configuration override."""

    def __init__(self, config: MatrixConfig, **kwargs):
        self._config = config
        self._kwargs = kwargs
        self._keys = list(kwargs.keys())

    def __enter__(self):
        self._config._set_local(**self._kwargs)
        return self._config

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._config._clear_local(self._keys)
        return False


# =============================================================================
# Global Instance
# =============================================================================

config = MatrixConfig()


def get_config() -> MatrixConfig:
    """Get the global configuration instance."""
    return config


def set_memory(max_live_elements: Optional[int] = None,
               max_buffer_elements: Optional[int] = None,
               alignment: int = 64):
    """
    Configure buffer allocation limits.

    Args:
        max_live_elements: Cap on elements held by all live buffers
        max_buffer_elements: Cap on elements of a single buffer
        alignment: Memory alignment
    """
    config.memory = MemoryConfig(
        alignment=alignment,
        max_buffer_elements=max_buffer_elements,
        max_live_elements=max_live_elements,
    )


__all__ = [
    "MemoryConfig",
    "FormatConfig",
    "ValidationConfig",
    "MatrixConfig",
    "config",
    "get_config",
    "set_memory",
]
