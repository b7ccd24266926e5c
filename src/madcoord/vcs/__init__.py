"""Version-control collaborator (git CLI)."""

from madcoord.vcs.git import DEFAULT_BRANCH, GitClient, NotAGitRepository

__all__ = [
    "DEFAULT_BRANCH",
    "GitClient",
    "NotAGitRepository",
]
