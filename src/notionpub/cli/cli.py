"""CLI entrypoint: Typer app definition and command registration"""

import typer

from notionpub.cli.commands import export_cmd, list_cmd, plugins_cmd, show_cmd


app = typer.Typer(name="notionpub", no_args_is_help=True, help="Notion-backed blog content pipeline")

app.command(name="list")(list_cmd)
app.command(name="show")(show_cmd)
app.command(name="export")(export_cmd)
app.command(name="plugins")(plugins_cmd)
