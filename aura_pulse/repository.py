"""Repository reference parsing."""

from typing import NamedTuple
from urllib.parse import urlparse


class RepositoryReference(NamedTuple):
    """An owner/name pair identifying a GitHub repository."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def url(self) -> str:
        return f"https://github.com/{self.owner}/{self.name}"


def parse_repository_url(repository_url: str) -> RepositoryReference:
    """
    Parse "owner/repo" or "https://github.com/owner/repo" into a reference.

    A trailing ".git" suffix and any extra path segments are ignored.

    Raises:
        ValueError: If no owner and repository name can be extracted.
    """
    value = repository_url.strip()
    if "://" in value:
        path = urlparse(value).path
    elif value.startswith("github.com/"):
        path = value[len("github.com/") :]
    else:
        path = value

    parts = [part for part in path.split("/") if part]
    if len(parts) < 2:
        raise ValueError(f"Invalid repository URL: {repository_url}")

    name = parts[1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return RepositoryReference(owner=parts[0], name=name)
