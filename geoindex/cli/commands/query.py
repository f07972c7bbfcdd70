"""
Query Command - Run radius and rectangle queries.

Usage:
    geoindex query radius --lat 52.22573 --lng 0.149593 --radius 100000
    geoindex query rectangle --min-lat 51 --min-lng -1 --max-lat 52 --max-lng 0.5
"""

import json
import logging
from decimal import Decimal
from typing import Any, Dict, List

import click

from geoindex.cli.main import pass_context
from geoindex.model.point import GeoPoint, QueryRadiusInput, QueryRectangleInput
from geoindex.query.filters import decode_point
from geoindex.query.planner import QueryPlan

logger = logging.getLogger("geoindex.cli.query")

OUTPUT_FORMATS = ["text", "json"]


def json_default(value: Any) -> Any:
    """Serialize store values json does not handle."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


@click.group("query")
def query():
    """Query a geo table."""


@query.command("radius")
@click.option("--lat", type=float, required=True, help="Center latitude in degrees.")
@click.option("--lng", type=float, required=True, help="Center longitude in degrees.")
@click.option(
    "--radius",
    "-r",
    type=float,
    required=True,
    help="Radius in meters.",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--explain",
    is_flag=True,
    default=False,
    help="Print the query plan instead of running the query.",
)
@pass_context
def radius(ctx, lat: float, lng: float, radius: float, output_format: str, explain: bool):
    """
    Find points within a distance of a center point.

    \b
    Examples:
        # Capitals within 100 km of Cambridge
        geoindex query radius --lat 52.22573 --lng 0.149593 --radius 100000

        # Show the range scans that would be issued
        geoindex query radius --lat 52.2 --lng 0.1 --radius 5000 --explain
    """
    query_input = QueryRadiusInput(
        center_point=GeoPoint(lat, lng),
        radius_in_meter=radius,
    )

    if explain:
        output_plan(ctx.manager.plan_radius(query_input))
        return

    records = ctx.manager.query_radius(query_input)
    output_records(ctx, records, output_format)


@query.command("rectangle")
@click.option("--min-lat", type=float, required=True, help="South edge latitude.")
@click.option("--min-lng", type=float, required=True, help="West edge longitude.")
@click.option("--max-lat", type=float, required=True, help="North edge latitude.")
@click.option("--max-lng", type=float, required=True, help="East edge longitude.")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--explain",
    is_flag=True,
    default=False,
    help="Print the query plan instead of running the query.",
)
@pass_context
def rectangle(
    ctx,
    min_lat: float,
    min_lng: float,
    max_lat: float,
    max_lng: float,
    output_format: str,
    explain: bool,
):
    """
    Find points inside a latitude/longitude rectangle.

    Bounds are inclusive. A west edge greater than the east edge selects
    a rectangle crossing the antimeridian.

    \b
    Examples:
        geoindex query rectangle --min-lat 51 --min-lng -1 --max-lat 52 --max-lng 0.5
    """
    query_input = QueryRectangleInput(
        min_point=GeoPoint(min_lat, min_lng),
        max_point=GeoPoint(max_lat, max_lng),
    )

    if explain:
        output_plan(ctx.manager.plan_rectangle(query_input))
        return

    records = ctx.manager.query_rectangle(query_input)
    output_records(ctx, records, output_format)


def output_plan(plan: QueryPlan):
    """Output a query plan as JSON."""
    click.echo(json.dumps(plan.to_dict(), indent=2))


def output_records(ctx, records: List[Dict[str, Any]], output_format: str):
    """Output query results in the requested format."""
    if output_format.lower() == "json":
        click.echo(json.dumps(records, indent=2, default=json_default))
        return

    if not records:
        click.echo("\nNo points found.")
        return

    config = ctx.config
    hidden = {
        config.hash_key_attribute_name,
        config.range_key_attribute_name,
        config.geohash_attribute_name,
        config.geojson_attribute_name,
    }

    click.echo(f"\nFound {len(records)} points\n")
    for record in records:
        try:
            lat, lng = decode_point(
                record.get(config.geojson_attribute_name),
                longitude_first=config.longitude_first,
            )
            location = f"({lat:.6f}, {lng:.6f})"
        except ValueError:
            location = "(unknown)"

        attributes = ", ".join(
            f"{k}={json_default(v) if isinstance(v, Decimal) else v}"
            for k, v in sorted(record.items())
            if k not in hidden
        )
        click.echo(f"  {record.get(config.range_key_attribute_name)} {location} {attributes}")

    click.echo()
