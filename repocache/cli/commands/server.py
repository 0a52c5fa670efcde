"""Server command: run the API in the foreground."""

import cyclopts
import uvicorn

app = cyclopts.App(name="serve", help="Run the cache server")


@app.default
def serve(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
) -> None:
    """Run the repocache HTTP server.

    Configuration is read from REPOCACHE_* environment variables, a .env file,
    or the YAML file named by REPOCACHE_CONFIG_FILE.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        reload: Restart on code changes (development only).
    """
    uvicorn.run(
        "repocache.application.api.rest.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,  # configure_logging owns the root logger
    )
