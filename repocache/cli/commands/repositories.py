"""Repository commands: thin HTTP client against a running server."""

import json
import os
import sys
from typing import Any, Literal

import cyclopts
import httpx

from repocache.cli.console import get_console, relative_time

ProviderName = Literal["github", "gitlab"]

app = cyclopts.App(name="repo", help="Query cached repository artifacts")


def get_server_url() -> str:
    """Get server URL from environment."""
    return os.environ.get("REPOCACHE_SERVER", "http://localhost:8000")


def _request(path: str) -> dict[str, Any]:
    console = get_console()
    server_url = get_server_url()
    try:
        response = httpx.get(f"{server_url}/api/v1/repositories{path}", timeout=30.0)
    except httpx.ConnectError:
        console.error(
            f"Could not connect to server at {server_url}",
            hint="Is the server running? Start it with: repocache serve",
        )
        sys.exit(1)

    if response.is_error:
        try:
            detail = response.json()
            message = detail.get("message") or detail.get("detail") or response.text
        except ValueError:
            message = response.text
        console.error(f"Server error: {response.status_code} - {message}")
        sys.exit(1)

    return response.json()


@app.command
def get(
    provider: ProviderName,
    organization: str,
    repository: str,
    /,
    version: str | None = None,
) -> None:
    """Print the artifact for a repository.

    Args:
        provider: Hosting provider.
        organization: Owner or group.
        repository: Repository name.
        version: Exact version (commit SHA). Defaults to the latest.
    """
    path = f"/{provider}/{organization}/{repository}"
    if version:
        path = f"{path}/commits/{version}"
    data = _request(path)

    console = get_console()
    source = "cache" if data["cached"] else provider
    console.print(
        f"[bold]{organization}/{repository}[/bold] @ {data['version']} [dim](from {source})[/dim]"
    )
    console.json(json.dumps(data["content"], indent=2))


@app.command
def versions(provider: ProviderName, organization: str, repository: str, /) -> None:
    """List cached versions, newest first."""
    data = _request(f"/{provider}/{organization}/{repository}/versions")
    console = get_console()
    if not data["versions"]:
        console.warning(f"No cached versions for {organization}/{repository}")
        return
    console.table(
        [
            {"version": v["version"], "cached": relative_time(v["created_at"])}
            for v in data["versions"]
        ],
        [("version", "Version"), ("cached", "Cached")],
        title=f"{provider}:{organization}/{repository}",
    )


@app.command
def latest(provider: ProviderName, organization: str, repository: str, /) -> None:
    """Print the latest version without fetching content."""
    data = _request(f"/{provider}/{organization}/{repository}/latest")
    get_console().print(data["version"])
