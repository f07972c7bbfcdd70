"""
Geoindex CLI - Main Entry Point

Command-line interface for loading and querying geo tables.
Built with Click for argument parsing and help generation.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from geoindex import __version__
from geoindex.config import GeoDataManagerConfiguration, load_config
from geoindex.exceptions import ConfigurationError
from geoindex.query.manager import GeoDataManager

# Configure logging for CLI
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("geoindex")


class GeoIndexContext:
    """Context object for passing global options to subcommands."""

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        config_path: Optional[Path] = None,
        table_name: Optional[str] = None,
        store_type: Optional[str] = None,
        manager: Optional[GeoDataManager] = None,
    ):
        self.verbose = verbose
        self.quiet = quiet
        self.config_path = config_path
        self.table_name = table_name
        self.store_type = store_type
        self._config = manager.config if manager is not None else None
        self._manager = manager

        # Configure logging based on verbosity
        if quiet:
            logger.setLevel(logging.WARNING)
        elif verbose:
            logger.setLevel(logging.DEBUG)
        else:
            logger.setLevel(logging.INFO)

    @property
    def config(self) -> GeoDataManagerConfiguration:
        """Lazy load configuration."""
        if self._config is None:
            self._config = self._load_config()
        return self._config

    @property
    def manager(self) -> GeoDataManager:
        """Lazy create the table manager."""
        if self._manager is None:
            self._manager = GeoDataManager(self.config)
        return self._manager

    def _load_config(self) -> GeoDataManagerConfiguration:
        """Load configuration from file and environment, then apply options."""
        overrides = {}
        if self.table_name:
            overrides["table_name"] = self.table_name
        if self.store_type:
            overrides["store_type"] = self.store_type

        try:
            config = load_config(str(self.config_path) if self.config_path else None)
        except ConfigurationError as e:
            # A table name on the command line is enough without any file
            if e.source != "environment" or not self.table_name:
                raise
            return GeoDataManagerConfiguration.from_dict(overrides)

        if overrides:
            values = config.to_dict()
            values.update(overrides)
            config = GeoDataManagerConfiguration.from_dict(values)

        logger.debug(f"Using table {config.table_name} ({config.store_type})")
        return config


class GeoIndexGroup(click.Group):
    """Custom Click group with examples in the help text."""

    def format_help(self, ctx, formatter):
        """Format help with banner and examples."""
        formatter.write_paragraph()
        formatter.write_text("Geoindex - Geospatial queries on DynamoDB")
        formatter.write_paragraph()

        super().format_help(ctx, formatter)

        formatter.write_paragraph()
        formatter.write_text("Examples:")
        formatter.indent()

        examples = [
            "# Print the create-table request",
            "geoindex --table capitals table request",
            "",
            "# Load points from a JSON file",
            "geoindex --table capitals load --input capitals.json",
            "",
            "# Points within 100 km of Cambridge",
            "geoindex --table capitals query radius --lat 52.22573 --lng 0.149593 --radius 100000",
            "",
            "# Points inside a rectangle",
            "geoindex --table capitals query rectangle --min-lat 51 --min-lng -1 --max-lat 52 --max-lng 0.5",
        ]

        for line in examples:
            formatter.write_text(line)

        formatter.dedent()


pass_context = click.make_pass_decorator(GeoIndexContext, ensure=True)


@click.group(cls=GeoIndexGroup)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Enable verbose output (debug logging).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Quiet mode (only warnings and errors).",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file.",
)
@click.option(
    "-t",
    "--table",
    "table_name",
    help="Table name (overrides configuration).",
)
@click.option(
    "--store",
    "store_type",
    type=click.Choice(["dynamodb", "memory"], case_sensitive=False),
    help="Store backend (overrides configuration).",
)
@click.version_option(
    version=__version__,
    prog_name="geoindex",
    message="%(prog)s version %(version)s",
)
@click.pass_context
def cli(
    ctx,
    verbose: bool,
    quiet: bool,
    config_path: Optional[Path],
    table_name: Optional[str],
    store_type: Optional[str],
):
    """
    Geoindex CLI - Geospatial point index on DynamoDB

    Loads points into a geo table and answers radius and rectangle queries.
    """
    if verbose and quiet:
        raise click.UsageError("Cannot use both --verbose and --quiet")

    # Keep a context supplied by the caller (embedding, tests)
    if isinstance(ctx.obj, GeoIndexContext):
        return

    ctx.obj = GeoIndexContext(
        verbose=verbose,
        quiet=quiet,
        config_path=config_path,
        table_name=table_name,
        store_type=store_type.lower() if store_type else None,
    )


@cli.command("config")
@pass_context
def show_config(ctx):
    """Display the effective configuration."""
    import yaml

    click.echo(yaml.safe_dump({"geoindex": ctx.config.to_dict()}, sort_keys=False))


def register_commands():
    """Register all subcommands."""
    from geoindex.cli.commands import load, query, table

    cli.add_command(load.load)
    cli.add_command(query.query)
    cli.add_command(table.table)


register_commands()


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except Exception as e:
        logger.error(f"Error: {e}")
        if "--verbose" in sys.argv or "-v" in sys.argv:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
