"""Dependency injection container for bigssh."""

from dataclasses import dataclass

from bigssh.config import Config
from bigssh.services.adapter import DeferredStreamAdapter
from bigssh.services.session import SessionFactory


@dataclass
class Dependencies:
    """Container for bigssh dependencies.

    Example:
        deps = Dependencies.create()
        handles = deps.adapter.execute(command, deps.config.get_host("web1"))
    """

    config: Config
    factory: SessionFactory
    adapter: DeferredStreamAdapter

    @classmethod
    def create(cls) -> "Dependencies":
        """Create dependencies with default configuration."""
        return cls.from_config(Config())

    @classmethod
    def from_config(cls, config: Config) -> "Dependencies":
        """Create dependencies with custom configuration.

        Args:
            config: Custom Config instance

        Returns:
            Dependencies with session factory and adapter built from config
        """
        factory = SessionFactory(
            known_hosts=config.known_hosts_path,
            strict_host_key_checking=config.strict_host_key_checking,
            connect_timeout=config.connect_timeout or None,
        )
        return cls(config=config, factory=factory, adapter=DeferredStreamAdapter(factory))
