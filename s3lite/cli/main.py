"""
s3lite CLI entry point

This module provides a small command line interface over the storage facades,
handy to inspect or seed an S3-compatible endpoint.
"""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from s3lite import __version__
from s3lite.config import configure_logging, get_storage_config, load_config
from s3lite.exceptions import ConfigurationError, S3LiteException
from s3lite.storage import storage_factory
from s3lite.utilities import guess_content_type


# Default config file location
DEFAULT_CONFIG_PATH = Path.home() / ".s3lite" / "config.yml"


def get_default_config_file():
    """
    Get the default configuration file path if it exists.

    :returns: Path to ~/.s3lite/config.yml if it exists, None otherwise
    """
    if DEFAULT_CONFIG_PATH.is_file():
        return str(DEFAULT_CONFIG_PATH)
    return None


def get_storage_from_context(ctx):
    """
    Get or create a storage facade from the CLI context.

    This lazily creates the facade on first use.
    """
    if ctx.obj.get("storage") is None:
        config = ctx.obj.get("configdict", {})
        try:
            ctx.obj["storage"] = storage_factory(get_storage_config(config))
        except ConfigurationError as e:
            click.echo(f"Configuration error: {e}", err=True)
            ctx.exit(1)
    return ctx.obj["storage"]


def run(ctx, operation, *args, **kwargs):
    """Call ``operation`` on the storage facade, exiting with 1 on any s3lite error"""
    storage = get_storage_from_context(ctx)
    try:
        return getattr(storage, operation)(*args, **kwargs)
    except S3LiteException as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


bucket_option = click.option(
    "-b",
    "--bucket",
    type=str,
    default="",
    help="Bucket name (defaults to storage.bucket_name from the configuration)",
)


@click.group()
@click.version_option(version=__version__, prog_name="s3lite")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
)
@click.pass_context
def cli(ctx, config_path):
    """
    s3lite - client for S3-compatible object storage

    \b
    Configuration:
      Default config file: ~/.s3lite/config.yml
      Override with: --config /path/to/config.yml
      Environment: S3LITE_KEY, S3LITE_SECRET, S3LITE_ENDPOINT, S3LITE_REGION...
    """
    ctx.ensure_object(dict)

    # Use default config if none provided
    if config_path is None:
        config_path = get_default_config_file()
        if config_path:
            click.echo(f"Using default config: {config_path}", err=True)

    try:
        config = load_config(config_path)
        ctx.obj["configdict"] = config
        ctx.obj["config_path"] = config_path
        configure_logging(config)
        # Storage will be created lazily when needed
        ctx.obj["storage"] = None
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        ctx.exit(1)


@cli.command(name="bucket-exists")
@click.argument("bucket", required=False, default="")
@click.pass_context
def bucket_exists(ctx, bucket):
    """Print whether BUCKET exists (exit code 2 when it does not)"""
    exists = run(ctx, "bucket_exists", bucket)
    click.echo("true" if exists else "false")
    if not exists:
        ctx.exit(2)


@cli.command(name="create-bucket")
@click.argument("bucket", required=False, default="")
@click.pass_context
def create_bucket(ctx, bucket):
    """Create BUCKET, doing nothing if it already exists"""
    name = bucket or get_storage_from_context(ctx).bucket_name
    run(ctx, "create_bucket", bucket)
    click.echo(f"Bucket ready: {name}")


@cli.command(name="delete-bucket")
@click.argument("bucket", required=False, default="")
@click.pass_context
def delete_bucket(ctx, bucket):
    """Delete an empty BUCKET, doing nothing if it does not exist"""
    name = bucket or get_storage_from_context(ctx).bucket_name
    if run(ctx, "delete_bucket", bucket):
        click.echo(f"Deleted bucket: {name}")
    else:
        click.echo(f"Bucket does not exist: {name}")


@cli.command()
@click.argument("key")
@bucket_option
@click.pass_context
def exists(ctx, key, bucket):
    """Print whether object KEY exists (exit code 2 when it does not)"""
    found = run(ctx, "object_exists", key, bucket)
    click.echo("true" if found else "false")
    if not found:
        ctx.exit(2)


@cli.command()
@click.argument("file_path", type=click.Path(dir_okay=False))
@click.argument("key", required=False)
@click.option("-t", "--content-type", type=str, default=None, help="Content type (guessed from the file name if omitted)")
@bucket_option
@click.pass_context
def put(ctx, file_path, key, content_type, bucket):
    """Upload FILE_PATH as object KEY (defaults to the file name)"""
    key = key or Path(file_path).name
    content_type = content_type or guess_content_type(file_path)
    run(ctx, "put_file", file_path, key, content_type, bucket)
    click.echo(f"Uploaded: {key}")


@cli.command(name="put-dir")
@click.argument("path", type=click.Path(file_okay=False))
@click.option("--prefix", type=str, default="", help="Virtual directory to upload into")
@bucket_option
@click.option(
    "-p",
    "--porcelain",
    is_flag=True,
    default=False,
    help="Machine-readable output (one key per line, no formatting)",
)
@click.pass_context
def put_dir(ctx, path, prefix, bucket, porcelain):
    """Upload every file under PATH, keys relative to PATH"""
    keys = run(ctx, "put_directory", path, prefix, bucket)
    if porcelain:
        for key in keys:
            click.echo(key)
        return
    table = Table(title=f"Uploaded {len(keys)} files")
    table.add_column("Key", style="cyan")
    for key in keys:
        table.add_row(key)
    Console().print(table)


@cli.command()
@click.argument("key")
@click.option("-o", "--output", type=click.Path(dir_okay=False, writable=True), default=None, help="Write to this file instead of stdout")
@bucket_option
@click.pass_context
def get(ctx, key, output, bucket):
    """Download the content of object KEY"""
    content = run(ctx, "get_object_content", key, bucket)
    if output:
        Path(output).write_bytes(content)
        click.echo(f"Saved {len(content)} bytes to {output}", err=True)
    else:
        click.echo(content, nl=False)


@cli.command()
@click.argument("key")
@bucket_option
@click.pass_context
def delete(ctx, key, bucket):
    """Delete object KEY, doing nothing if it does not exist"""
    if run(ctx, "delete_object", key, bucket):
        click.echo(f"Deleted: {key}")
    else:
        click.echo(f"Object does not exist: {key}")


if __name__ == "__main__":
    cli()
