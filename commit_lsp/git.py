"""Git remote discovery and remote URL parsing."""

import asyncio
import logging
import re
from pathlib import Path
from urllib.parse import unquote, urlsplit

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# git@github.com:owner/repo.git, org@vs-ssh.visualstudio.com:v3/org/project/repo
_SCP_LIKE = re.compile(r"^(?:(?P<user>[^@/]+)@)?(?P<host>[^:/]+):(?P<path>(?!//).*)$")


class GitUrl(BaseModel):
    """A remote URL broken into the parts trackers care about.

    Handles https/http/ssh/git URLs and scp-like ``user@host:path`` remotes.
    """

    model_config = ConfigDict(frozen=True)

    raw: str
    scheme: str  # "ssh" for scp-like remotes
    host: str
    port: int | None = None
    segments: tuple[str, ...] = ()  # path split on "/", ".git" suffix removed

    @classmethod
    def parse(cls, url: str) -> "GitUrl":
        cleaned = url.strip()
        if not cleaned:
            raise ValueError("empty git url")

        if "://" in cleaned:
            parts = urlsplit(cleaned)
            if not parts.hostname:
                raise ValueError(f"no host in git url '{cleaned}'")
            return cls(
                raw=cleaned,
                scheme=parts.scheme.lower(),
                host=parts.hostname.lower(),
                port=parts.port,
                segments=_split_path(parts.path),
            )

        match = _SCP_LIKE.match(cleaned)
        if not match:
            raise ValueError(f"unrecognised git url '{cleaned}'")
        return cls(
            raw=cleaned,
            scheme="ssh",
            host=match["host"].lower(),
            segments=_split_path(match["path"]),
        )

    @property
    def host_and_path(self) -> str:
        return "/".join((self.host, *self.segments))

    @property
    def location(self) -> str:
        """The url as written, without scheme and user info.

        ``https://ci@GitHub.com/acme/w.git`` -> ``GitHub.com/acme/w.git``,
        ``git@github.com:acme/w.git`` -> ``github.com:acme/w.git``.
        """
        rest = self.raw.split("://", 1)[1] if "://" in self.raw else self.raw
        authority, sep, path = rest.partition("/")
        return authority.rpartition("@")[2] + sep + path

    @property
    def web_scheme(self) -> str:
        # ssh remotes are served over https by every supported tracker
        return "http" if self.scheme == "http" else "https"

    @property
    def web_port(self) -> int | None:
        return self.port if self.scheme in ("http", "https") else None

    def __str__(self) -> str:
        return self.raw


def _split_path(path: str) -> tuple[str, ...]:
    segments = [unquote(s) for s in path.split("/") if s]
    if segments and segments[-1].endswith(".git"):
        segments[-1] = segments[-1].removesuffix(".git")
    return tuple(s for s in segments if s)


async def _git(cwd: Path, *args: str) -> str | None:
    """Run a git command and return its stripped stdout, or None on failure."""
    try:
        proc = await asyncio.create_subprocess_exec(
            "git",
            *args,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        logger.warning("Failed to run git: %s", exc)
        return None
    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        logger.debug("git %s failed: %s", " ".join(args), stderr.decode(errors="replace").strip())
        return None
    return stdout.decode(errors="replace").strip()


async def get_toplevel(cwd: Path) -> Path | None:
    """Return the root of the work tree containing cwd."""
    out = await _git(cwd, "rev-parse", "--show-toplevel")
    return Path(out) if out else None


async def get_remote_url(cwd: Path, remote: str = "origin") -> str | None:
    """Return the URL of the given remote, or None when it is not configured."""
    out = await _git(cwd, "ls-remote", "--get-url", remote)
    # ls-remote echoes the remote name back when no such remote exists
    if not out or out == remote:
        return None
    return out
