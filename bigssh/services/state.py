"""Global state management for bigssh."""

from typing import TYPE_CHECKING

from bigssh.config import Config

if TYPE_CHECKING:
    from bigssh.dependencies import Dependencies

# Global state (initialized on first access)
_config: Config | None = None
_deps: "Dependencies | None" = None


def get_config() -> Config:
    """Get or create config."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_dependencies() -> "Dependencies":
    """Get or create the dependency container built from the global config."""
    # Imported here: bigssh.dependencies imports the services package
    from bigssh.dependencies import Dependencies

    global _deps
    if _deps is None:
        _deps = Dependencies.from_config(get_config())
    return _deps


def reset_state() -> None:
    """Reset global state for testing."""
    global _config, _deps
    _config = None
    _deps = None


def set_config(config: Config) -> None:
    """Set the global config instance."""
    global _config
    _config = config


def set_dependencies(deps: "Dependencies") -> None:
    """Set the global dependency container."""
    global _deps
    _deps = deps
