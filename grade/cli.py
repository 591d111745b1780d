#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

import dataclasses
import json
import logging
import os
import sys

import click
import httpx
from grade.lib.config import config_from_dict, load_config
from grade.lib.errors import GradeError
from grade.lib.parser import GoBenchParser
from grade.lib.pipeline import run as run_pipeline
from grade.lib.sink_factory import SinkFactory


@click.group()
@click.option("-v", "--verbose", count=True, default=0)
@click.option(
    "-c",
    "--config",
    type=click.Path(dir_okay=False),
    default=lambda: os.environ.get("GRADE_CONFIG"),
    help="YAML file with run settings",
)
@click.pass_context
def grade(ctx, verbose, config):
    ctx.ensure_object(dict)

    # warn is 30, should default to 30 when verbose=0
    # each level below warning is 10 less than the previous
    log_level = verbose * (-10) + 30
    logging.basicConfig(format="%(levelname)s:%(name)s: %(message)s", level=log_level)

    ctx.obj["config"] = config


@grade.command()
@click.argument("report", type=click.File("r"), default="-")
@click.option("--database", help="database to store the results in")
@click.option("--goversion", "go_version", help="Go version tag, e.g. go1.21.4")
@click.option("--timestamp", help="time of the run, Unix seconds or ISO-8601")
@click.option("--revision", help="revision tag of the benchmarked code")
@click.option("--hwid", "hardware_id", help="hardware id tag")
@click.option("--sink", "sink_name", type=click.Choice(SinkFactory.registered_names))
@click.option("--influxurl", help="InfluxDB URL, e.g. http://localhost:8086")
@click.option("--timeout", type=float, help="seconds to wait for the write")
@click.pass_context
def run(ctx, report, sink_name, influxurl, timeout, **settings):
    """Parse REPORT and write its benchmarks to the database."""
    logger = logging.getLogger("grade.run")

    try:
        if ctx.obj["config"]:
            config = load_config(ctx.obj["config"], settings)
        else:
            config = config_from_dict(
                {key: value for key, value in settings.items() if value is not None}
            )
    except GradeError as e:
        logger.error("Invalid configuration:\n{}".format(e))
        sys.exit(1)

    options = dict(config.sink)
    name = options.pop("name", "influxdb")
    if sink_name and sink_name != name:
        # options in the config file belong to a different sink
        name, options = sink_name, {}
    if name == "influxdb":
        if influxurl:
            options["url"] = influxurl
        if timeout is not None:
            options["timeout"] = timeout

    try:
        sink = SinkFactory.create(name, **options)
    except (KeyError, TypeError) as e:
        logger.error('Cannot create sink "{}": {}'.format(name, e))
        sys.exit(1)

    try:
        batch = run_pipeline(report, sink, config)
    except (GradeError, httpx.HTTPError) as e:
        logger.error("{}: {}".format(type(e).__name__, e))
        sys.exit(1)
    finally:
        sink.close()

    logger.info("Wrote {} points".format(len(batch.points)))


@grade.command()
@click.argument("report", type=click.File("r"), default="-")
def parse(report):
    """Print the benchmarks in REPORT as JSON, grouped by package."""
    logger = logging.getLogger("grade.parse")

    try:
        benchset = GoBenchParser().parse(report)
    except GradeError as e:
        logger.error(str(e))
        sys.exit(1)

    click.echo(
        json.dumps(
            {
                package: [dataclasses.asdict(r) for r in records]
                for package, records in benchset.items()
            },
            indent=2,
        )
    )
