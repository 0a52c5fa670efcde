"""Main CLI application using Cyclopts.

``serve`` runs the server; the other commands are a thin HTTP client that
talks to it via the REST API.
"""

import cyclopts

from repocache.cli.commands import repositories, server

app = cyclopts.App(
    name="repocache",
    help="Repository artifact cache - CLI",
)

app.command(server.app, name="serve")
app.command(repositories.app, name="repo")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
