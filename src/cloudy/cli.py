"""CLI entrypoint for cloudy."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from dotenv import find_dotenv, load_dotenv
from rich.console import Console

from cloudy.config import (
    CloudinaryConfig,
    Config,
    config_path,
    load_config,
    mask_secret,
    resolve_config,
    save_config,
)
from cloudy.errors import CloudyError, ConfigError, SignatureError
from cloudy.log import setup_logging

app = typer.Typer(
    name="cloudy",
    help="Cloudinary Uploader CLI - upload media to Cloudinary",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def print_error(message: str):
    err_console.print(f"[bold red]✗[/bold red] {message}")


def print_info(message: str):
    console.print(f"[bold blue]ℹ[/bold blue] {message}")


def print_success(message: str):
    console.print(f"[bold green]✓[/bold green] {message}")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
):
    """Upload media files to Cloudinary."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    load_dotenv(find_dotenv(usecwd=True))


@app.command()
def init():
    """Initialize the Cloudinary credentials file."""
    print_info("Initializing Cloudinary Uploader CLI configuration...")

    path = config_path()
    if path.exists():
        console.print(f"[yellow]⚠[/yellow] Configuration file already exists at: {path}")
        if not typer.confirm("Do you want to overwrite it?", default=False):
            print_info("Configuration initialization aborted.")
            return

    print_info("Please enter your Cloudinary credentials:")
    cloud_name = typer.prompt("Cloud Name")
    api_key = typer.prompt("API Key")
    api_secret = typer.prompt("API Secret", hide_input=True)
    default_folder = typer.prompt("Default Folder (optional)", default="", show_default=False)

    config = Config(
        cloudinary=CloudinaryConfig(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            default_folder=default_folder,
        )
    )
    try:
        save_config(config, path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    print_success(f"Configuration file created at: {path}")


@app.command()
def upload(
    path: Annotated[
        Path | None,
        typer.Argument(help="File or directory to upload (omit for interactive selection)"),
    ] = None,
    folder: Annotated[
        str | None, typer.Option("--folder", "-f", help="Cloudinary destination folder")
    ] = None,
    transform: Annotated[
        str | None, typer.Option("--transform", "-t", help="Convert images to webp or avif")
    ] = None,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Save uploaded URLs to this file")
    ] = None,
    workers: Annotated[
        int | None, typer.Option("--workers", "-w", min=1, help="Concurrent uploads")
    ] = None,
):
    """Upload files to Cloudinary."""
    from cloudy.pipeline.select import InteractiveSelector, selector_for
    from cloudy.pipeline.upload import upload_files

    try:
        config = resolve_config()
        selector = selector_for(path)
        if isinstance(selector, InteractiveSelector):
            print_info("Select files to upload (use Tab to select multiple files):")
        files = selector.select()
        upload_files(
            files,
            config,
            console,
            folder=folder,
            transform=transform,
            output=output,
            max_workers=workers,
        )
    except SignatureError as e:
        print_error(f"Upload aborted: {e}")
        raise typer.Exit(code=1)
    except CloudyError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except OSError as e:
        print_error(f"Failed to save URLs to file: {e}")
        raise typer.Exit(code=1)


@app.command("config")
def show_config():
    """Show the current configuration."""
    try:
        config = load_config()
    except ConfigError as e:
        print_error(f"Failed to load configuration: {e}")
        print_info("Run 'cloudy init' to create a new configuration file.")
        return

    cloudinary = config.cloudinary
    print_info("Current Cloudinary Configuration:")
    console.print(f"  [cyan]Cloud Name[/cyan]: {cloudinary.cloud_name}")
    console.print(f"  [cyan]API Key[/cyan]: {cloudinary.api_key}")
    console.print(f"  [cyan]API Secret[/cyan]: {mask_secret(cloudinary.api_secret)}")
    if cloudinary.default_folder:
        console.print(f"  [cyan]Default Folder[/cyan]: {cloudinary.default_folder}")
    else:
        console.print("  [cyan]Default Folder[/cyan]: [dim](not set)[/dim]")

    console.print(f"\n[green]Config File[/green]: {config_path()}")


@app.command()
def version():
    """Show version information."""
    from cloudy import __version__

    console.print(f"cloudy version {__version__}")


if __name__ == "__main__":
    app()
