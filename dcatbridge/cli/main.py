"""Main CLI application using Cyclopts."""

import cyclopts

from dcatbridge.cli.commands import export, server

app = cyclopts.App(
    name="dcat-bridge",
    help="Stream metadata shares as DCAT open-data catalogs",
)

app.command(server.app, name="server")
app.command(export.export, name="export")


def main() -> None:
    app()
