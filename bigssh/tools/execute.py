"""bigssh tool: run a command on an SSH host and return its output."""

import logging

from fastmcp import Context

from bigssh.models import CommandSpec
from bigssh.services import get_dependencies, run_remote

logger = logging.getLogger(__name__)


class ContextStatusReporter:
    """Forwards execution progress text to the MCP client as log messages."""

    def __init__(self, ctx: Context) -> None:
        self._ctx = ctx

    async def working(self, text: str) -> None:
        await self._ctx.info(text)


async def bigssh(
    host: str,
    command: str,
    args: list[str] | None = None,
    stdin: str | None = None,
    ctx: Context | None = None,
) -> str:
    """Run a command on a remote host over SSH.

    Args:
        host: Host name from the SSH config.
        command: Base command line (e.g. "ls -la").
        args: Extra arguments; spaces inside an argument are escaped.
        stdin: Text sent to the command's standard input.

    Examples:
        bigssh("web1", "uptime")
        bigssh("web1", "ls", ["/var/log", "my dir"])
        bigssh("db1", "wc -l", stdin="a\\nb\\n")

    Returns:
        Command output, a [stderr] section if any, and the exit status,
        or an error message.
    """
    try:
        deps = get_dependencies()
        credentials = deps.config.get_host(host)
        if credentials is None:
            available = ", ".join(sorted(deps.config.get_hosts())) or "(none)"
            return f"Error: Unknown host '{host}'. Available: {available}"

        reporter = ContextStatusReporter(ctx) if ctx is not None else None
        result = await run_remote(
            deps.adapter,
            CommandSpec(command_line=command, command_args=tuple(args or ())),
            credentials,
            stdin=stdin.encode("utf-8") if stdin else None,
            min_error=deps.config.min_error,
            reporter=reporter,
        )
    except Exception as e:
        logger.error("bigssh tool failed for %s: %s", host, e)
        return f"Error: {e}"

    output_parts = []
    if result.output:
        output_parts.append(result.output)
    if result.error:
        output_parts.append(f"[stderr]\n{result.error}")

    if result.failure is not None:
        output_parts.append(f"Error: {result.failure.cause}")
        return "\n".join(output_parts)
    if result.status is None:
        output_parts.append("Error: Execution ended without a completion status")
        return "\n".join(output_parts)

    if result.status.signal:
        output_parts.append(f"[signal: {result.status.signal}]")
    if result.status.exit_code:
        output_parts.append(f"[exit code: {result.status.exit_code}]")
    if result.policy_error:
        output_parts.append(f"Error: {result.policy_error}")

    return "\n".join(output_parts) if output_parts else "(no output)"
