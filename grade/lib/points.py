#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Mapping, Sequence, Union

from grade.lib.config import RunConfig
from grade.lib.parser import BenchmarkRecord


MEASUREMENT = "benchmarks"
PRECISION = "s"

FieldValue = Union[str, int, float]


@dataclass
class Point(object):
    measurement: str
    tags: Dict[str, str]
    fields: Dict[str, FieldValue]


@dataclass
class BatchPoints(object):
    """Points written together, sharing one database, time and tag set."""

    database: str
    tags: Dict[str, str]
    time: datetime
    precision: str = PRECISION
    points: List[Point] = field(default_factory=list)


def make_fields(record: BenchmarkRecord, revision: str) -> Dict[str, FieldValue]:
    """Fields for a record: revision and n, plus each metric that was measured."""
    fields: Dict[str, FieldValue] = {"revision": revision, "n": record.n}

    if record.ns_per_op is not None:
        fields["ns_per_op"] = float(record.ns_per_op)
    if record.mb_per_s is not None:
        fields["mb_per_s"] = float(record.mb_per_s)
    if record.alloced_bytes_per_op is not None:
        fields["alloced_bytes_per_op"] = int(record.alloced_bytes_per_op)
    if record.allocs_per_op is not None:
        fields["allocs_per_op"] = int(record.allocs_per_op)

    return fields


def make_point(package: str, record: BenchmarkRecord, revision: str) -> Point:
    return Point(
        measurement=MEASUREMENT,
        tags={"pkg": package, "ncpu": str(record.num_cpu), "name": record.name},
        fields=make_fields(record, revision),
    )


def make_batch(
    config: RunConfig, benchset: Mapping[str, Sequence[BenchmarkRecord]]
) -> BatchPoints:
    """Project every record of every package into one batch of points.

    Points are ordered the same way as the packages and records in benchset.
    The config is expected to be validated already.
    """
    batch = BatchPoints(
        database=config.database,
        tags={"goversion": config.go_version, "hwid": config.hardware_id},
        time=config.timestamp,
        precision=PRECISION,
    )

    for package, records in benchset.items():
        for record in records:
            batch.points.append(make_point(package, record, config.revision))

    return batch
