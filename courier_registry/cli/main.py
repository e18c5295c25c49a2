"""Main CLI application using Cyclopts."""

import cyclopts

from courier_registry.cli.commands import config, db, server

app = cyclopts.App(
    name="courier-registry",
    help="Courier instance registry - server and maintenance commands",
)

app.command(server.serve, name="serve")
app.command(db.migrate, name="migrate")
app.command(config.app, name="config")
