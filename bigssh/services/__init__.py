"""Services for bigssh."""

from bigssh.services.adapter import DeferredStreamAdapter, ExecutionHandles, TerminalSlot
from bigssh.services.channels import DeferredChannel, InputSink, OutputSource
from bigssh.services.errors import (
    ChannelClosedError,
    ConnectionError,
    CredentialLoadError,
    ExecLaunchError,
    ExecutionCancelledError,
    ExecutionError,
    StreamTransportError,
)
from bigssh.services.runner import classify, run_remote
from bigssh.services.session import SessionFactory, SSHSession, load_private_key
from bigssh.services.state import (
    get_config,
    get_dependencies,
    reset_state,
    set_config,
    set_dependencies,
)

__all__ = [
    "ChannelClosedError",
    "ConnectionError",
    "CredentialLoadError",
    "DeferredChannel",
    "DeferredStreamAdapter",
    "ExecLaunchError",
    "ExecutionCancelledError",
    "ExecutionError",
    "ExecutionHandles",
    "InputSink",
    "OutputSource",
    "SSHSession",
    "SessionFactory",
    "StreamTransportError",
    "TerminalSlot",
    "classify",
    "get_config",
    "get_dependencies",
    "load_private_key",
    "reset_state",
    "run_remote",
    "set_config",
    "set_dependencies",
]
