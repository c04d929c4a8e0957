"""Credential acquisition through a user-configured external command."""

import asyncio
import logging
from collections.abc import Sequence

from commit_lsp.errors import AcquisitionFailed, CommandNotFound
from commit_lsp.models import Credential

logger = logging.getLogger(__name__)

# Output readers of children that outlived their caller; kept until the child exits.
_pending_reads: set[asyncio.Future] = set()


def split_command(command: Sequence[str]) -> list[str]:
    """Split every element on whitespace. Shell quoting is not interpreted."""
    return [part for arg in command for part in arg.split()]


def _strip_one_newline(text: str) -> str:
    if text.endswith("\n"):
        text = text[:-1]
        if text.endswith("\r"):
            text = text[:-1]
    return text


async def acquire(command: Sequence[str], timeout: float | None = None) -> Credential:
    """Run the credentials command and return its output as a Credential.

    The child inherits the environment of the server. Once spawned it is
    shielded from cancellation: if the caller gives up (timeout or a
    superseded request), the command still runs to completion and its output
    is discarded.
    """
    argv = split_command(command)
    if not argv:
        raise AcquisitionFailed("credentials command is empty")

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise CommandNotFound(f"credentials command '{argv[0]}' not found") from exc
    except OSError as exc:
        raise AcquisitionFailed(f"failed to start credentials command '{argv[0]}': {exc}") from exc

    communicate = asyncio.ensure_future(proc.communicate())
    _pending_reads.add(communicate)
    communicate.add_done_callback(_pending_reads.discard)
    try:
        stdout, _ = await asyncio.wait_for(asyncio.shield(communicate), timeout=timeout)
    except TimeoutError:
        raise AcquisitionFailed(f"credentials command '{argv[0]}' timed out after {timeout}s") from None

    if proc.returncode != 0:
        logger.debug("Credentials command '%s' exited with code %s", argv[0], proc.returncode)
        raise AcquisitionFailed(f"credentials command '{argv[0]}' exited with code {proc.returncode}")

    secret = _strip_one_newline(stdout.decode(errors="replace"))
    if not secret:
        raise AcquisitionFailed(f"credentials command '{argv[0]}' produced no output")
    # The token goes into an HTTP header, which only carries printable ASCII.
    if not secret.isascii() or not secret.isprintable():
        raise AcquisitionFailed(f"credentials command '{argv[0]}' produced a non-printable or non-ASCII token")
    return Credential(secret)
