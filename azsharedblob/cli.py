"""
azsharedblob Command-Line Interface

Check and create containers and upload files to Azure Blob Storage.

Author: azsharedblob contributors
"""

import sys
import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import click
from pydantic import ValidationError

from azsharedblob import __version__
from azsharedblob.auth.exceptions import AuthenticationError
from azsharedblob.core.config_manager import ClientConfig, ConfigManager
from azsharedblob.core.logging_config import get_logger, setup_logging
from azsharedblob.protocol.errors import BlobResult
from azsharedblob.services.blob.client import BlobClient

logger = get_logger("azsharedblob.cli")


def _load_config(ctx: click.Context, **overrides: Any) -> ClientConfig:
    """Load configuration and set up logging from the group options."""
    options = ctx.obj
    cli_overrides = dict(overrides)
    if options.get("log_level"):
        cli_overrides["logging"] = {"level": options["log_level"].upper()}

    try:
        config = ConfigManager().load(
            config_file=str(options["config"]) if options.get("config") else None,
            cli_overrides=cli_overrides,
        )
    except (ValidationError, ValueError, FileNotFoundError) as e:
        click.echo(f"[ERROR] Invalid configuration: {e}", err=True)
        sys.exit(1)

    setup_logging(
        level=config.logging.level.value,
        format_type=config.logging.format,
        log_file=config.logging.file,
        rotation_size=config.logging.rotation_size,
        rotation_count=config.logging.rotation_count,
        module_levels=config.logging.module_levels,
    )
    return config


def _run(config: ClientConfig, operation: Callable[[BlobClient], Awaitable[BlobResult]]) -> BlobResult:
    """Run one client operation on a fresh event loop."""

    async def runner() -> BlobResult:
        async with BlobClient.from_config(config) as client:
            return await operation(client)

    try:
        return asyncio.run(runner())
    except (ValueError, AuthenticationError) as e:
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)


def _fail(result: BlobResult, action: str) -> None:
    error = result.error
    click.echo(f"[ERROR] Failed to {action}: {error.kind.value}: {error.message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="azsharedblob")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (YAML or JSON)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level",
)
@click.pass_context
def cli(ctx, config: Optional[Path], log_level: Optional[str]):
    """
    azsharedblob - Azure Blob Storage client with SharedKey signing

    Credentials come from the configuration file or from the
    AZSHAREDBLOB_ACCOUNT_NAME and AZSHAREDBLOB_ACCOUNT_KEY variables.
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["log_level"] = log_level


@cli.command()
@click.argument("container")
@click.pass_context
def exists(ctx, container: str):
    """
    Check whether a container exists.

    Exits with status 0 if it exists and 2 if it does not.

    Examples:
        azsharedblob exists photos
    """
    config = _load_config(ctx)
    result = _run(config, lambda client: client.container_exists(container))
    if not result.ok:
        _fail(result, f"check container '{container}'")

    if result.value:
        click.echo(f"[OK] Container '{container}' exists")
    else:
        click.echo(f"Container '{container}' does not exist")
        sys.exit(2)


@cli.command("create-container")
@click.argument("container")
@click.option(
    "--if-not-exists",
    is_flag=True,
    help="Succeed without changes when the container already exists",
)
@click.pass_context
def create_container(ctx, container: str, if_not_exists: bool):
    """
    Create a container.

    Examples:
        azsharedblob create-container photos
        azsharedblob create-container photos --if-not-exists
    """
    config = _load_config(ctx)

    if if_not_exists:
        result = _run(config, lambda client: client.create_container_if_not_exists(container))
        if not result.ok:
            _fail(result, f"create container '{container}'")
        if result.value:
            click.echo(f"[OK] Container '{container}' created")
        else:
            click.echo(f"[OK] Container '{container}' already exists")
        return

    result = _run(config, lambda client: client.create_container(container))
    if not result.ok:
        _fail(result, f"create container '{container}'")
    click.echo(f"[OK] Container '{container}' created")


@cli.command()
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("container")
@click.option("--name", help="Blob name (default: file name)")
@click.option("--chunk-size", type=click.IntRange(min=1), help="Block size in bytes")
@click.option("--concurrency", type=click.IntRange(min=1), help="Blocks staged in parallel")
@click.pass_context
def upload(
    ctx,
    file: Path,
    container: str,
    name: Optional[str],
    chunk_size: Optional[int],
    concurrency: Optional[int],
):
    """
    Upload a local file as a block blob.

    Examples:
        azsharedblob upload cat.jpg photos
        azsharedblob upload backup.tar backups --name 2026-10-19.tar --chunk-size 8388608
    """
    config = _load_config(ctx, chunk_size=chunk_size, max_concurrency=concurrency)
    blob_name = name or file.name

    result = _run(config, lambda client: client.upload_local_blob(file, container, blob_name))
    if not result.ok:
        _fail(result, f"upload '{file}'")

    click.echo(f"[OK] Uploaded '{file}' to {container}/{blob_name}")
    click.echo(f"   Blocks: {len(result.value.latest)}")


def main():
    """Main entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
