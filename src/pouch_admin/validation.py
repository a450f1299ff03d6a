"""Pydantic validation decorator for CLI commands."""

from collections.abc import Callable
from typing import Any, TypeVar

from makefun import wraps
from pydantic import BaseModel, ValidationError
import typer

F = TypeVar("F", bound=Callable[..., Any])


def validate(model_class: type[BaseModel]) -> Callable[[F], F]:
    """Decorator for Pydantic validation of CLI command arguments.

    Uses makefun.wraps so Typer still sees the original signature (options,
    defaults and help text). Kwargs whose names match ``model_class`` fields
    are validated; the command is then called with the validated values plus
    the remaining kwargs untouched.

    Example:
        @app.command()
        @validate(KeyCreateInput)
        def create(name: str = typer.Option(...), json_output: bool = False):
            ...
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(**kwargs: Any) -> Any:
            model_fields = model_class.model_fields.keys()
            model_data = {k: v for k, v in kwargs.items() if k in model_fields}
            try:
                validated = model_class(**model_data)
            except ValidationError as e:
                for err in e.errors():
                    loc = ".".join(str(x) for x in err["loc"])
                    typer.echo(f"✗ {loc}: {err['msg']}", err=True)
                raise typer.Exit(1) from e

            all_kwargs = validated.model_dump()
            all_kwargs.update({k: v for k, v in kwargs.items() if k not in model_fields})
            return func(**all_kwargs)

        return wrapper  # type: ignore

    return decorator
