"""CLI for brewops-forms."""

import logging
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from brewops_forms import __version__
from brewops_forms.api import ApiError, BrewOpsClient, SessionFileCredentials
from brewops_forms.config import (
    ConfigError,
    Settings,
    get_brewops_home,
    get_config_path,
    load_settings,
    write_settings,
)
from brewops_forms.core import ManualScheduler
from brewops_forms.display import DisplayWindow, series_heights
from brewops_forms.forms import (
    FORMS,
    FormController,
    FormNotFoundError,
    UnknownFieldError,
    get_form,
)
from brewops_forms.log import setup_logging
from brewops_forms.notifications import ConsoleNotifier

app = typer.Typer(
    name="brewops",
    help="Validate and submit BrewOps operations forms.",
    no_args_is_help=True,
)
console = Console()

LISTS = {
    "inventory": ("list_inventory", ("inventoryid", "quantity")),
    "production": ("list_production", ("production_id", "production_date", "quantity")),
    "suppliers": ("list_suppliers", ("supplier_id", "name", "email", "phone")),
}


def version_callback(value: bool) -> None:
    if value:
        console.print(f"brewops-forms version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show debug logging"),
    ] = False,
) -> None:
    """brewops: Validate and submit BrewOps operations forms."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


def _settings() -> Settings:
    try:
        return load_settings()
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _credentials(settings: Settings) -> SessionFileCredentials:
    return SessionFileCredentials(
        settings.session_path,
        token_key=settings.token_key,
        legacy_keys=settings.legacy_token_keys,
    )


def make_client(settings: Settings) -> BrewOpsClient:
    """Build the API client used by commands that reach the backend."""
    return BrewOpsClient(
        settings.backend_url,
        credentials=_credentials(settings),
        timeout=settings.request_timeout,
    )


def _parse_assignments(items: list[str] | None, what: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for item in items or []:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"Expected {what} as name=value, got '{item}'")
        values[name] = value
    return values


def _form_context(name: str, settings: Settings, client: BrewOpsClient | None) -> dict[str, Any]:
    if name in ("change-password", "profile"):
        return {"credentials": _credentials(settings)}
    if name == "add-supplier" and client is not None:
        try:
            return {"existing_suppliers": client.list_suppliers()}
        except ApiError as e:
            console.print(f"[yellow]Warning:[/yellow] Could not load suppliers: {e}")
    return {}


def _controller(
    name: str,
    settings: Settings,
    client: BrewOpsClient | None = None,
) -> FormController:
    try:
        definition = get_form(name, **_form_context(name, settings, client))
    except FormNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    return FormController(
        definition,
        client=client,
        scheduler=ManualScheduler(),
        notifier=ConsoleNotifier(console),
        debounce=settings.debounce_seconds,
        message_timeout=settings.message_timeout,
    )


def _apply_values(controller: FormController, values: dict[str, str]) -> None:
    try:
        controller.set_values(**values)
    except UnknownFieldError as e:
        console.print(f"[red]Error:[/red] {e.args[0]}")
        console.print(f"Fields: {', '.join(controller.definition.field_names)}")
        raise typer.Exit(1)


def _print_errors(errors: dict[str, str]) -> None:
    for field, message in errors.items():
        console.print(f"  [red]✗[/red] {field}: {message}")


@app.command()
def init(
    backend_url: Annotated[
        str | None,
        typer.Option("--backend-url", "-u", help="Root URL of the BrewOps backend"),
    ] = None,
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing config file",
    ),
) -> None:
    """Initialize brewops global configuration.

    Creates:
      ~/.config/brewops/config.yaml

    Examples:
        brewops init --backend-url http://localhost:5000
        brewops init --force
    """
    home = get_brewops_home()
    config_path = get_config_path()

    if config_path.exists() and not force:
        console.print(f"[yellow]Warning:[/yellow] Config already exists at {config_path}")
        console.print("Use --force to overwrite")
        raise typer.Exit(1)

    console.print(f"[bold]Initializing brewops at {home}[/bold]")
    settings = Settings(backend_url=backend_url) if backend_url else Settings()
    write_settings(settings, config_path)
    console.print(f"  [green]✓[/green] Created config at {config_path}")

    console.print("\n[green]✓ Initialized brewops[/green]")
    console.print(f"  Backend: {settings.backend_url}")
    console.print(f"  Session: {settings.session_path}")


@app.command()
def forms() -> None:
    """List the available forms and their fields."""
    table = Table(title="Forms")
    table.add_column("Form", style="bold", no_wrap=True)
    table.add_column("Title")
    table.add_column("Request")
    table.add_column("Fields")

    for name in FORMS:
        definition = get_form(name)
        fields = ", ".join(
            f"{spec.name} (read-only)" if spec.read_only else spec.name
            for spec in definition.fields
        )
        table.add_row(name, definition.title, f"{definition.method} {definition.path}", fields)

    console.print(table)


@app.command()
def validate(
    form: Annotated[str, typer.Argument(help="Form name, see 'brewops forms'")],
    values: Annotated[
        list[str] | None,
        typer.Argument(help="Field values as name=value"),
    ] = None,
) -> None:
    """Run a form's validation rules without contacting the backend.

    Every field is checked as if the form were submitted, so untouched
    required fields are reported too.
    """
    settings = _settings()
    controller = _controller(form, settings)
    _apply_values(controller, _parse_assignments(values, "field"))

    errors = controller.validate_all()
    controller.close()
    if errors:
        console.print(f"[red]Invalid:[/red] {form}")
        _print_errors(errors)
        raise typer.Exit(1)
    console.print(f"[green]Valid:[/green] {form}")


@app.command()
def submit(
    form: Annotated[str, typer.Argument(help="Form name, see 'brewops forms'")],
    values: Annotated[
        list[str] | None,
        typer.Argument(help="Field values as name=value"),
    ] = None,
    params: Annotated[
        list[str] | None,
        typer.Option("--param", "-p", help="Path parameter as name=value, e.g. id=12"),
    ] = None,
) -> None:
    """Submit a form to the configured backend.

    Forms that edit an existing record are loaded first when path
    parameters are given; field values on the command line override the
    loaded ones.
    """
    settings = _settings()
    field_values = _parse_assignments(values, "field")
    path_params = _parse_assignments(params, "parameter")

    with make_client(settings) as client:
        controller = _controller(form, settings, client)
        try:
            if controller.definition.load_path and path_params:
                if controller.load(**path_params) is None:
                    raise typer.Exit(1)
            _apply_values(controller, field_values)
            outcome = controller.submit(**path_params)
        except ValueError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
        finally:
            controller.close()

    if outcome.errors:
        console.print(f"[red]Not submitted:[/red] {form} has invalid fields")
        _print_errors(outcome.errors)
        raise typer.Exit(1)
    if not outcome.succeeded:
        raise typer.Exit(1)
    if outcome.redirect:
        console.print(f"  Next: {outcome.redirect}")


@app.command(name="list")
def list_records(
    kind: Annotated[str, typer.Argument(help=f"One of: {', '.join(LISTS)}")],
    show_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Show every record instead of the first page"),
    ] = False,
) -> None:
    """Show records from the backend, one page at a time."""
    if kind not in LISTS:
        console.print(f"[red]Error:[/red] Unknown list: {kind}")
        raise typer.Exit(1)
    method, columns = LISTS[kind]

    settings = _settings()
    with make_client(settings) as client:
        try:
            records = getattr(client, method)()
        except ApiError as e:
            console.print(f"[red]Error:[/red] Failed to fetch {kind}: {e}")
            raise typer.Exit(1)

    window = DisplayWindow(records, default=settings.page_size)
    while show_all and not window.expanded:
        window.show_more()
    shown = window.visible()

    table = Table(title=kind.capitalize())
    for column in columns:
        table.add_column(column)
    with_bars = "quantity" in columns
    if with_bars:
        table.add_column("")
    heights = series_heights(shown, "quantity") if with_bars else []
    for index, record in enumerate(shown):
        row = [str(record.get(column, "")) for column in columns]
        if with_bars:
            row.append("█" * round(heights[index] / 5))
        table.add_row(*row)

    console.print(table)
    console.print(window.summary)
    if window.has_toggle and not window.expanded:
        console.print(f"{window.label}: use --all")
