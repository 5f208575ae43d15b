import asyncio
import pathlib
from typing import Optional

import typer
import uvicorn
from rich.panel import Panel

from argus_intel.core.config_loader import CONFIG
from argus_intel.core.exceptions import InvalidSubjectError
from argus_intel.core.localization import SUPPORTED_LANGUAGES, Localizer
from argus_intel.core.logger_config import setup_logging
from argus_intel.core.renderer import render_panel
from argus_intel.core.schemas import TargetKind
from argus_intel.core.session import AnalysisSession
from argus_intel.core.utils import console, save_or_print_results
from argus_intel.core.views import PrimaryView


# --- : Startup Banner ---
BANNER = r"""
    _    ____   ____ _   _ ____    ___ _   _ _____ _____ _
   / \  |  _ \ / ___| | | / ___|  |_ _| \ | |_   _| ____| |
  / _ \ | |_) | |  _| | | \___ \   | ||  \| | | | |  _| | |
 / ___ \|  _ <| |_| | |_| |___) |  | || |\  | | | | |___| |___
/_/   \_\_| \_\\____|\___/|____/  |___|_| \_| |_| |_____|_____|
"""


def _invalid_input(error: Exception) -> None:
    console.print(
        Panel(f"[bold red]Invalid Input:[/] {error}", title="Error", border_style="red")
    )
    raise typer.Exit(code=1)


def _localizer(language: Optional[str]) -> Localizer:
    try:
        return Localizer(language)
    except ValueError as e:
        _invalid_input(e)


def _finish(session: AnalysisSession, output_file: Optional[str]) -> None:
    view = session.view()
    if output_file:
        save_or_print_results(session.export_panel(), output_file)
    else:
        render_panel(view, session.localizer, console)
    if view.primary is PrimaryView.ERROR or view.upload_error:
        raise typer.Exit(code=1)


async def _analyze(
    session: AnalysisSession, subject: str, target: TargetKind, reliability: bool
) -> None:
    await session.search(subject, target=target)
    if reliability and session.can_run_reliability():
        await session.run_reliability()


def run_search(
    subject: str,
    target: TargetKind,
    reliability: bool,
    language: Optional[str],
    output_file: Optional[str],
) -> None:
    """Runs a primary analysis (and optionally the reliability pass) and shows it."""
    session = AnalysisSession(localizer=_localizer(language), target=target)
    try:
        asyncio.run(_analyze(session, subject, target, reliability))
    except InvalidSubjectError as e:
        _invalid_input(e)
    _finish(session, output_file)


_RELIABILITY_OPTION = typer.Option(
    False, "--reliability", "-r", help="Also run the FIRA reliability analysis."
)
_LANG_OPTION = typer.Option(
    None, "--lang", "-l", help=f"Output language: {', '.join(SUPPORTED_LANGUAGES)}."
)
_OUTPUT_OPTION = typer.Option(
    None, "--output", "-o", help="Save the results to a JSON file."
)


def get_cli_app():
    """
    Creates the core Typer application with all analysis commands registered.
    """
    app = typer.Typer(
        name="Argus Intel",
        help="An AI-assisted OSINT dashboard for domains, IPs, emails and images.",
        add_completion=False,
        rich_markup_mode="markdown",
    )

    @app.command(name="version", help="Show Argus Intel version.")
    def version():
        """Show Argus Intel version."""
        typer.echo(f"{CONFIG.app_name} v{CONFIG.version}")

    @app.command(name="search", help="Analyze a domain, IP address or email address.")
    def search(
        subject: str = typer.Argument(..., help="The value to analyze."),
        target: TargetKind = typer.Option(
            CONFIG.dashboard.default_target,
            "--target",
            "-t",
            case_sensitive=False,
            help="What kind of value SUBJECT is.",
        ),
        reliability: bool = _RELIABILITY_OPTION,
        language: Optional[str] = _LANG_OPTION,
        output_file: Optional[str] = _OUTPUT_OPTION,
    ):
        """Routes SUBJECT to the producer for its target kind."""
        run_search(subject, target, reliability, language, output_file)

    @app.command(name="whois", help="WHOIS analysis of a domain name.")
    def whois(
        domain: str = typer.Argument(..., help="The target domain."),
        reliability: bool = _RELIABILITY_OPTION,
        language: Optional[str] = _LANG_OPTION,
        output_file: Optional[str] = _OUTPUT_OPTION,
    ):
        run_search(domain, TargetKind.DOMAIN, reliability, language, output_file)

    @app.command(name="network", help="Network analysis (NAY) of an IP address.")
    def network(
        ip: str = typer.Argument(..., help="The target IP address or domain."),
        reliability: bool = _RELIABILITY_OPTION,
        language: Optional[str] = _LANG_OPTION,
        output_file: Optional[str] = _OUTPUT_OPTION,
    ):
        run_search(ip, TargetKind.IP, reliability, language, output_file)

    @app.command(name="email", help="Analysis of an email address.")
    def email(
        address: str = typer.Argument(..., help="The target email address."),
        reliability: bool = _RELIABILITY_OPTION,
        language: Optional[str] = _LANG_OPTION,
        output_file: Optional[str] = _OUTPUT_OPTION,
    ):
        run_search(address, TargetKind.EMAIL, reliability, language, output_file)

    @app.command(
        name="metadata", help="Extract the metadata of a JPEG or PNG image (BEDA)."
    )
    def metadata(
        image_path: pathlib.Path = typer.Argument(
            ..., exists=True, dir_okay=False, help="Path to the image file to analyze."
        ),
        language: Optional[str] = _LANG_OPTION,
        output_file: Optional[str] = _OUTPUT_OPTION,
    ):
        """Image metadata is analyzed locally; no reliability pass is offered."""
        session = AnalysisSession(localizer=_localizer(language))
        session.upload(image_path.name, image_path.read_bytes())
        _finish(session, output_file)

    @app.command(name="dashboard", help="Serve the dashboard API.")
    def dashboard(
        host: str = typer.Option("127.0.0.1", "--host", help="Host to bind."),
        port: int = typer.Option(8000, "--port", "-p", help="Port to listen on."),
    ):
        console.print(
            f"[bold cyan]Starting dashboard API on http://{host}:{port}/api[/bold cyan]"
        )
        uvicorn.run("argus_intel.webapp.main:app", host=host, port=port, reload=False)

    return app


app = get_cli_app()


def main():
    """
    Main entry point for the Argus Intel CLI application.
    """
    print(BANNER)
    setup_logging()
    app()


if __name__ == "__main__":
    main()
