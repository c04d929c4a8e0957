"""Per-request snapshot of the repository: remote URL plus both config layers."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from commit_lsp.git import get_remote_url, get_toplevel
from commit_lsp.models import ConfigFile
from commit_lsp.settings import CommitLspSettings, load_config_file, repo_config_path, user_config_path


class RepoState(BaseModel):
    model_config = ConfigDict(frozen=True)

    root: Path
    remote_url: str | None = None
    repo_config: ConfigFile = ConfigFile()
    user_config: ConfigFile = ConfigFile()


async def load_repo_state(cwd: Path, settings: CommitLspSettings) -> RepoState:
    """Resolve the work tree root and load everything the pipeline reads.

    Raises ConfigError if either config file is invalid.
    """
    root = await get_toplevel(cwd) or cwd
    return RepoState(
        root=root,
        remote_url=await get_remote_url(root, settings.remote),
        repo_config=load_config_file(repo_config_path(root)),
        user_config=load_config_file(user_config_path(settings)),
    )
