"""Server commands."""

import cyclopts
import logfire
import uvicorn

app = cyclopts.App(name="server", help="Run the catalog HTTP server")

APP_FACTORY = "dcatbridge.application.api.rest.app:create_app"


@app.command
def start(
    host: str = "0.0.0.0",
    port: int = 5000,
    *,
    reload: bool = False,
) -> None:
    """Start the catalog server in the foreground.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        reload: Restart on code changes (development only).
    """
    # Spans are only exported when LOGFIRE_TOKEN is set
    logfire.configure(send_to_logfire="if-token-present", console=False)

    uvicorn.run(
        APP_FACTORY,
        factory=True,
        host=host,
        port=port,
        reload=reload,
        access_log=True,
    )
