"""bigssh: run remote commands over SSH behind connection-deferred streams."""

__version__ = "0.1.0"
