import asyncio
from typing import Literal

from rich.table import Table
from rich.text import Text
import typer

from pouch_admin.client import get_api_client
from pouch_admin.commands.common import console, echo_json, fail
from pouch_admin.exceptions import PouchAdminError
from pouch_admin.models.schema import FieldSchema, PluginCatalog

app = typer.Typer()

PluginKind = Literal["middlewares", "providers"]


def _describe_field(name: str, schema: FieldSchema) -> str:
    text = f"{name}:{schema.type.value}"
    if schema.role:
        text += f"[{schema.role.value}]"
    if schema.default is not None:
        text += f"={schema.default}"
    return text


async def list_plugins_command(kind: PluginKind) -> PluginCatalog:
    api_client = get_api_client()
    try:
        if kind == "middlewares":
            return await api_client.list_middlewares()
        return await api_client.list_providers()
    finally:
        await api_client.close()


def _show_catalog(kind: PluginKind, json_output: bool) -> None:
    try:
        catalog = asyncio.run(list_plugins_command(kind))
    except PouchAdminError as e:
        fail(str(e))

    if json_output:
        echo_json(catalog.to_payload())
        return

    if not len(catalog):
        console.print(f"[yellow]No {kind} registered.[/yellow]")
        return

    table = Table(title=kind.capitalize())
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Default", justify="center")
    table.add_column("Fields")
    for descriptor in catalog:
        fields = ", ".join(_describe_field(n, s) for n, s in descriptor.field_schemas.items())
        table.add_row(descriptor.id, "✓" if descriptor.is_default else "", Text(fields or "-"))
    console.print(table)


@app.command()
def middlewares(json_output: bool = typer.Option(False, "--json", help="Output as JSON")):
    """List middlewares the backend can attach to a key."""
    _show_catalog("middlewares", json_output)


@app.command()
def providers(json_output: bool = typer.Option(False, "--json", help="Output as JSON")):
    """List upstream providers a key can route to."""
    _show_catalog("providers", json_output)
