"""
Load Command - Write points from a JSON file.

Usage:
    geoindex load --input capitals.json
"""

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from geoindex.cli.main import pass_context
from geoindex.model.point import GeoPoint, PutPointInput

logger = logging.getLogger("geoindex.cli.load")


@click.command("load")
@click.option(
    "--input",
    "-i",
    "input_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="JSON file holding a list of objects with latitude and longitude.",
)
@click.option(
    "--range-key-field",
    "-k",
    help="Field used as range key value (default: random UUID per point).",
)
@click.option(
    "--lat-field",
    default="latitude",
    show_default=True,
    help="Field holding the latitude.",
)
@click.option(
    "--lng-field",
    default="longitude",
    show_default=True,
    help="Field holding the longitude.",
)
@pass_context
def load(
    ctx,
    input_path: Path,
    range_key_field: Optional[str],
    lat_field: str,
    lng_field: str,
):
    """
    Write points from a JSON file in batches.

    Every object in the file becomes one point. Fields other than the
    coordinates and the range key are stored as item attributes.

    \b
    Examples:
        geoindex --table capitals load --input capitals.json
        geoindex --table capitals load --input capitals.json --range-key-field capital
    """
    with open(input_path) as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise click.BadParameter("expected a JSON list of objects", param_hint="--input")

    put_inputs = build_put_inputs(data, range_key_field, lat_field, lng_field)

    click.echo(f"\nLoading {len(put_inputs)} points into {ctx.config.table_name}...")
    start_time = time.time()
    responses = ctx.manager.batch_write_points(put_inputs)
    elapsed = time.time() - start_time

    unprocessed = sum(
        len(items)
        for response in responses
        for items in (response.get("UnprocessedItems") or {}).values()
    )

    click.echo(f"  Batches: {len(responses)}")
    click.echo(f"  Elapsed time: {elapsed:.1f}s")
    if unprocessed:
        click.echo(f"  Unprocessed items: {unprocessed}")
    click.echo()


def build_put_inputs(
    data: List[Dict[str, Any]],
    range_key_field: Optional[str],
    lat_field: str,
    lng_field: str,
) -> List[PutPointInput]:
    """Convert loaded JSON objects to put requests."""
    put_inputs = []
    for index, record in enumerate(data):
        if lat_field not in record or lng_field not in record:
            raise click.BadParameter(
                f"record {index} has no {lat_field}/{lng_field}", param_hint="--input"
            )

        if range_key_field:
            if range_key_field not in record:
                raise click.BadParameter(
                    f"record {index} has no {range_key_field}", param_hint="--range-key-field"
                )
            range_key = str(record[range_key_field])
        else:
            range_key = str(uuid.uuid4())

        skip = {lat_field, lng_field, range_key_field}
        item = {k: v for k, v in record.items() if k not in skip}
        put_inputs.append(
            PutPointInput(
                range_key_value=range_key,
                geo_point=GeoPoint(float(record[lat_field]), float(record[lng_field])),
                item=item,
            )
        )
    return put_inputs
