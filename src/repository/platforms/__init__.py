"""Platform data source implementations."""

from .bitbucket import BitbucketAPI
from .gitea import GiteaAPI
from .github import GitHubAPI
from .local import LocalGitAPI

__all__ = ["BitbucketAPI", "GiteaAPI", "GitHubAPI", "LocalGitAPI"]
