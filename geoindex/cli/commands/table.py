"""
Table Command - Print or execute the create-table request.

Usage:
    geoindex table request
    geoindex table create
"""

import json
import logging

import boto3
import click

from geoindex.cli.main import pass_context
from geoindex.storage.table import DEFAULT_THROUGHPUT, create_table, create_table_request

logger = logging.getLogger("geoindex.cli.table")


@click.group("table")
def table():
    """Geo table provisioning."""


def throughput_options(f):
    """Shared provisioned throughput options."""
    f = click.option(
        "--write-capacity",
        type=int,
        default=DEFAULT_THROUGHPUT["WriteCapacityUnits"],
        show_default=True,
        help="Provisioned write capacity units.",
    )(f)
    f = click.option(
        "--read-capacity",
        type=int,
        default=DEFAULT_THROUGHPUT["ReadCapacityUnits"],
        show_default=True,
        help="Provisioned read capacity units.",
    )(f)
    return f


@table.command("request")
@throughput_options
@pass_context
def request(ctx, read_capacity: int, write_capacity: int):
    """Print the create-table request as JSON."""
    throughput = {
        "ReadCapacityUnits": read_capacity,
        "WriteCapacityUnits": write_capacity,
    }
    click.echo(json.dumps(create_table_request(ctx.config, throughput), indent=2))


@table.command("create")
@throughput_options
@click.option(
    "--no-wait",
    is_flag=True,
    default=False,
    help="Return without waiting for the table to become active.",
)
@pass_context
def create(ctx, read_capacity: int, write_capacity: int, no_wait: bool):
    """Create the geo table in DynamoDB."""
    config = ctx.config
    kwargs = {}
    if config.region:
        kwargs["region_name"] = config.region
    if config.endpoint_url:
        kwargs["endpoint_url"] = config.endpoint_url
    if config.credentials:
        kwargs["aws_access_key_id"] = config.credentials.get("access_key_id")
        kwargs["aws_secret_access_key"] = config.credentials.get("secret_access_key")

    client = boto3.client("dynamodb", **kwargs)
    throughput = {
        "ReadCapacityUnits": read_capacity,
        "WriteCapacityUnits": write_capacity,
    }

    click.echo(f"\nCreating table {config.table_name}...")
    response = create_table(config, client, throughput=throughput, wait=not no_wait)
    status = response.get("TableDescription", {}).get("TableStatus", "unknown")
    click.echo(f"  Status: {'ACTIVE' if not no_wait else status}")
    click.echo()
