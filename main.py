# Copyright (c) 2025 Trae AI. All rights reserved.

import typer
from media_catalog.cli.main import app as cli_app
from media_catalog.server.app import Server

app = typer.Typer(help="Media Catalog - upload, list and serve movies and series.")

# Add CLI commands
app.registered_commands.extend(cli_app.registered_commands)

@app.command("server")
def run_server(config_path: str = "config.yaml"):
    """
    Run the catalog web server.
    """
    server = Server(config_path)
    server.run()

if __name__ == "__main__":
    app()
