from __future__ import annotations

from github import Github


def get_issue(gh: Github, owner: str, repo: str, number: int):
    # Pull requests are issues as far as the comments API is concerned.
    return gh.get_repo(f"{owner}/{repo}").get_issue(number)


def split_repo_name(full_name: str) -> tuple[str, str]:
    """Split "owner/name" into its two parts."""
    owner, sep, name = full_name.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ValueError(f"Expected a repository in owner/name format, got {full_name!r}.")
    return owner, name
