import typer

from pouch_admin.commands import keys, plugins
from pouch_admin.config import get_settings
from pouch_admin.logging_config import setup_logging

app = typer.Typer(
    name="pouch-admin",
    help="Manage API keys and plugin compositions of a pouch proxy",
    add_completion=False,
)

app.add_typer(keys.app, name="keys", help="Manage API keys")
app.add_typer(plugins.app, name="plugins", help="Browse available providers and middlewares")


@app.callback()
def main() -> None:
    settings = get_settings()
    setup_logging(
        service_name=settings.service_name,
        log_format=settings.log_format,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    app()
