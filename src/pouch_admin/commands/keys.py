import asyncio
from typing import Any

from pydantic import ValidationError
from rich.table import Table
from structlog.contextvars import bind_contextvars
import typer

from pouch_admin.client import get_api_client
from pouch_admin.commands.common import (
    STATE_STYLES,
    console,
    echo_json,
    fail,
    format_money,
    parse_field_assignment,
    parse_move,
    parse_provider_assignment,
)
from pouch_admin.editor import ConfigurationEditor, FieldView
from pouch_admin.exceptions import KeyNotFoundError, PouchAdminError
from pouch_admin.models.inputs import KeyCreateInput, KeyEditInput
from pouch_admin.models.key import Key
from pouch_admin.models.schema import PluginCatalog
from pouch_admin.roles import derive_rate_limit_display, describe_reset_mode
from pouch_admin.status import display_state, get_key_status, summarize_keys
from pouch_admin.validation import validate
from pouch_admin.values import format_number

app = typer.Typer()


def _find_key(keys: list[Key], key_id: int) -> Key:
    for key in keys:
        if key.id == key_id:
            return key
    raise KeyNotFoundError(f"Key {key_id} not found")


def _key_summary(key: Key, middleware_catalog: PluginCatalog) -> dict[str, Any]:
    status = get_key_status(key)
    return {
        **key.model_dump(mode="json"),
        "status": display_state(status).value,
        "usage_percent": round(status.usage_percent, 2),
        "expires": status.expires_text,
        "rate_limit": derive_rate_limit_display(key.configuration, middleware_catalog),
        "reset_mode": describe_reset_mode(key.configuration.reset_period),
    }


def _render_fields(fields: list[FieldView], indent: str = "    ") -> None:
    for f in fields:
        role = f" [dim]({f.schema.role.value})[/dim]" if f.schema.role else ""
        value = f.value.value
        if isinstance(value, float):
            value = format_number(value)
        console.print(f"{indent}{f.label}: [cyan]{value}[/cyan]{role}")


FieldSet = tuple[int, str, str]
ProviderSet = tuple[str, str]


def _apply_field_sets(
    editor: ConfigurationEditor, field_sets: list[FieldSet], provider_sets: list[ProviderSet]
) -> None:
    for index, field_name, value in field_sets:
        editor.update_middleware_field(index, field_name, value)
    for field_name, value in provider_sets:
        editor.update_provider_field(field_name, value)


# === list ===


async def list_keys_command() -> tuple[list[Key], PluginCatalog]:
    """Fetch keys plus the middleware catalog needed to read their roles."""
    api_client = get_api_client()
    try:
        keys = await api_client.list_keys()
        middleware_catalog = await api_client.list_middlewares()
    finally:
        await api_client.close()
    return keys, middleware_catalog


@app.command("list")
def list_keys(json_output: bool = typer.Option(False, "--json", help="Output as JSON")):
    """List all API keys with their status."""
    try:
        keys, middleware_catalog = asyncio.run(list_keys_command())
    except (PouchAdminError, ValidationError) as e:
        fail(str(e))

    if json_output:
        echo_json([_key_summary(k, middleware_catalog) for k in keys])
        return

    if not keys:
        console.print("[yellow]No API keys found.[/yellow] Create one with [bold]keys create[/bold].")
        return

    table = Table(title="API Keys")
    table.add_column("ID", justify="right", style="cyan", no_wrap=True)
    table.add_column("Name", style="magenta")
    table.add_column("Prefix", no_wrap=True)
    table.add_column("Provider")
    table.add_column("Status", no_wrap=True)
    table.add_column("Usage", justify="right")
    table.add_column("Rate Limit")
    table.add_column("Reset")
    table.add_column("Expires")

    for key in keys:
        status = get_key_status(key)
        state = display_state(status).value
        style = STATE_STYLES[state]
        limit = format_money(status.budget_limit) if status.budget_limit > 0 else "∞"
        table.add_row(
            str(key.id),
            key.name,
            key.prefix,
            key.configuration.provider.id or "-",
            f"[{style}]{state}[/{style}]",
            f"{format_money(key.budget_usage)} / {limit} ({status.usage_percent:.0f}%)",
            derive_rate_limit_display(key.configuration, middleware_catalog),
            describe_reset_mode(key.configuration.reset_period),
            status.expires_text,
        )

    console.print(table)
    summary = summarize_keys(keys)
    console.print(
        f"Total keys: [bold]{summary.total_keys}[/bold]  "
        f"Active: [bold green]{summary.active_keys}[/bold green]  "
        f"Budget: [bold]{format_money(summary.total_budget)}[/bold]  "
        f"Usage: [bold]{format_money(summary.total_usage)}[/bold]"
    )


# === show ===


async def show_key_command(key_id: int) -> tuple[Key, ConfigurationEditor]:
    bind_contextvars(key_id=key_id)
    api_client = get_api_client()
    try:
        editor = await ConfigurationEditor.load(api_client)
        key = _find_key(await api_client.list_keys(), key_id)
    finally:
        await api_client.close()
    editor.edit_key(key)
    return key, editor


@app.command()
def show(
    key_id: int = typer.Argument(..., help="Key ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show one key with its provider and middleware composition."""
    try:
        key, editor = asyncio.run(show_key_command(key_id))
    except (PouchAdminError, ValidationError) as e:
        fail(str(e))

    if json_output:
        echo_json(_key_summary(key, editor.middleware_catalog))
        return

    status = get_key_status(key)
    state = display_state(status).value
    style = STATE_STYLES[state]
    console.print(f"[bold]Key: {key.name} (#{key.id})[/bold]  [{style}]{state}[/{style}]")
    console.print(f"Prefix: [cyan]{key.prefix}[/cyan]")
    console.print(f"Expires: {status.expires_text}  Auto-renew: {'yes' if key.auto_renew else 'no'}")
    limit = format_money(status.budget_limit) if status.budget_limit > 0 else "unlimited"
    console.print(f"Budget: {format_money(key.budget_usage)} / {limit} ({status.usage_percent:.0f}%)")
    console.print(f"Reset: {editor.reset_mode()} ({key.configuration.reset_period}s)")
    console.print(f"Rate limit: {editor.rate_limit_display()}")

    console.print(f"\n[bold]Provider:[/bold] {editor.provider.id or '-'}")
    _render_fields(editor.provider_fields())

    console.print("\n[bold]Middlewares:[/bold]")
    views = {v.index: v for v in editor.middleware_views()}
    for index, middleware in enumerate(editor.middlewares):
        view = views.get(index)
        if view is None:
            console.print(f"  {index}. {middleware.id} [dim](unknown plugin, kept as-is)[/dim]")
            continue
        console.print(f"  {index}. [magenta]{view.id}[/magenta]")
        _render_fields(view.fields)


# === create ===


async def create_key_command(
    name: str,
    provider: str | None = None,
    middlewares: list[str] | None = None,
    include_defaults: bool = True,
    field_sets: list[FieldSet] | None = None,
    provider_sets: list[ProviderSet] | None = None,
    budget_limit: float | None = None,
    reset_period: int | None = None,
    expires_in_days: int = 0,
    auto_renew: bool = False,
) -> str:
    """Compose a new key from defaults plus the given edits and create it.

    Returns:
        The plaintext secret of the new key.
    """
    api_client = get_api_client()
    try:
        editor = await ConfigurationEditor.load(api_client)
        editor.new_key(name)
        if not include_defaults:
            editor.draft.configuration = editor.draft.configuration.model_copy(update={"middlewares": []})
        if provider:
            editor.change_provider(provider)
        for middleware_id in middlewares or []:
            editor.add_middleware(middleware_id)
        _apply_field_sets(editor, field_sets or [], provider_sets or [])
        if budget_limit is not None:
            editor.set_budget_limit(budget_limit)
        if reset_period is not None:
            editor.set_reset_period(reset_period)
        editor.set_expiration_days(expires_in_days)
        editor.set_auto_renew(auto_renew)
        return await editor.submit(api_client)
    finally:
        await api_client.close()


@app.command()
@validate(KeyCreateInput)
def create(
    name: str = typer.Option(..., "--name", "-n", help="Key name"),
    provider: str | None = typer.Option(None, "--provider", "-p", help="Provider id (default from settings)"),
    middleware: list[str] | None = typer.Option(None, "--middleware", "-m", help="Append a middleware by id"),
    no_defaults: bool = typer.Option(False, "--no-defaults", help="Do not preselect default middlewares"),
    field_set: list[str] | None = typer.Option(None, "--set", help="Middleware field, INDEX.FIELD=VALUE"),
    provider_set: list[str] | None = typer.Option(None, "--provider-set", help="Provider field, FIELD=VALUE"),
    budget_limit: float | None = typer.Option(None, "--budget-limit", help="Budget in USD, 0 for unlimited"),
    reset_period: int | None = typer.Option(None, "--reset-period", help="Reset period in seconds, 0 for never"),
    expires_in_days: int = typer.Option(0, "--expires-in-days", help="Days until expiry, 0 for never"),
    auto_renew: bool = typer.Option(False, "--auto-renew", help="Renew the budget automatically"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Create a new API key. The secret is shown only once."""
    field_sets = [parse_field_assignment(s) for s in field_set or []]
    provider_sets = [parse_provider_assignment(s) for s in provider_set or []]
    try:
        secret = asyncio.run(
            create_key_command(
                name,
                provider=provider,
                middlewares=middleware or [],
                include_defaults=not no_defaults,
                field_sets=field_sets,
                provider_sets=provider_sets,
                budget_limit=budget_limit,
                reset_period=reset_period,
                expires_in_days=expires_in_days,
                auto_renew=auto_renew,
            )
        )
    except (PouchAdminError, ValidationError) as e:
        fail(str(e))

    if json_output:
        echo_json({"name": name, "key": secret})
        return

    console.print("[bold green]✓ Key created successfully![/bold green]")
    console.print(f"Key: [bold yellow]{secret}[/bold yellow]")
    console.print("[dim]Copy it now, it will not be shown again.[/dim]")


# === edit ===


async def edit_key_command(
    key_id: int,
    name: str | None = None,
    provider: str | None = None,
    add_middlewares: list[str] | None = None,
    remove_indexes: list[int] | None = None,
    moves: list[tuple[int, str]] | None = None,
    field_sets: list[FieldSet] | None = None,
    provider_sets: list[ProviderSet] | None = None,
    budget_limit: float | None = None,
    reset_period: int | None = None,
    expires_in_days: int | None = None,
    no_expiry: bool = False,
    auto_renew: bool | None = None,
) -> dict[str, Any]:
    """Load a key, apply edits in a fixed order and submit the update.

    Order: provider, removals (highest index first, so indexes refer to the
    stored order), moves, additions, field values, scalar policy.
    """
    bind_contextvars(key_id=key_id)
    api_client = get_api_client()
    try:
        editor = await ConfigurationEditor.load(api_client)
        key = _find_key(await api_client.list_keys(), key_id)
        editor.edit_key(key)

        if name is not None:
            editor.set_name(name)
        if provider and provider != editor.provider.id:
            editor.change_provider(provider)
        for index in sorted(set(remove_indexes or []), reverse=True):
            editor.remove_middleware(index)
        for index, direction in moves or []:
            editor.move_middleware(index, direction)
        for middleware_id in add_middlewares or []:
            editor.add_middleware(middleware_id)
        _apply_field_sets(editor, field_sets or [], provider_sets or [])
        if budget_limit is not None:
            editor.set_budget_limit(budget_limit)
        if reset_period is not None:
            editor.set_reset_period(reset_period)
        if no_expiry:
            editor.set_expiration_days(0)
        elif expires_in_days is not None:
            editor.set_expiration_days(expires_in_days)
        if auto_renew is not None:
            editor.set_auto_renew(auto_renew)

        await editor.submit(api_client)
        return editor.to_request().model_dump(mode="json")
    finally:
        await api_client.close()


@app.command()
@validate(KeyEditInput)
def edit(
    key_id: int = typer.Argument(..., help="Key ID"),
    name: str | None = typer.Option(None, "--name", "-n", help="New key name"),
    provider: str | None = typer.Option(None, "--provider", "-p", help="Switch provider (resets its settings)"),
    add_middleware: list[str] | None = typer.Option(None, "--add-middleware", "-m", help="Append a middleware by id"),
    remove_middleware: list[int] | None = typer.Option(None, "--remove-middleware", help="Remove middleware at INDEX"),
    move: list[str] | None = typer.Option(None, "--move", help="Reorder, INDEX:up or INDEX:down"),
    field_set: list[str] | None = typer.Option(None, "--set", help="Middleware field, INDEX.FIELD=VALUE"),
    provider_set: list[str] | None = typer.Option(None, "--provider-set", help="Provider field, FIELD=VALUE"),
    budget_limit: float | None = typer.Option(None, "--budget-limit", help="Budget in USD, 0 for unlimited"),
    reset_period: int | None = typer.Option(None, "--reset-period", help="Reset period in seconds, 0 for never"),
    expires_in_days: int | None = typer.Option(None, "--expires-in-days", help="Expire this many days from now"),
    no_expiry: bool = typer.Option(False, "--no-expiry", help="Remove the expiry date"),
    auto_renew: bool | None = typer.Option(
        None, "--auto-renew/--no-auto-renew", help="Renew the budget automatically"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Edit an existing key's name, provider, middlewares and budget policy."""
    moves = [parse_move(m) for m in move or []]
    field_sets = [parse_field_assignment(s) for s in field_set or []]
    provider_sets = [parse_provider_assignment(s) for s in provider_set or []]
    try:
        result = asyncio.run(
            edit_key_command(
                key_id,
                name=name,
                provider=provider,
                add_middlewares=add_middleware or [],
                remove_indexes=remove_middleware or [],
                moves=moves,
                field_sets=field_sets,
                provider_sets=provider_sets,
                budget_limit=budget_limit,
                reset_period=reset_period,
                expires_in_days=expires_in_days,
                no_expiry=no_expiry,
                auto_renew=auto_renew,
            )
        )
    except (PouchAdminError, ValidationError) as e:
        fail(str(e))

    if json_output:
        echo_json(result)
        return

    console.print("[bold green]✓ Key updated successfully![/bold green]")
    console.print(f"ID: [cyan]{key_id}[/cyan]")
    console.print(f"Middlewares: {', '.join(m['id'] for m in result['middlewares']) or '-'}")


# === revoke ===


async def revoke_key_command(key_id: int) -> None:
    bind_contextvars(key_id=key_id)
    api_client = get_api_client()
    try:
        await api_client.delete_key(key_id)
    finally:
        await api_client.close()


@app.command()
def revoke(
    key_id: int = typer.Argument(..., help="Key ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Revoke (delete) a key. This cannot be undone."""
    if not yes:
        typer.confirm(f"Revoke key {key_id}? This cannot be undone", abort=True)
    try:
        asyncio.run(revoke_key_command(key_id))
    except PouchAdminError as e:
        fail(str(e))

    console.print(f"[bold green]✓ Key {key_id} revoked[/bold green]")
