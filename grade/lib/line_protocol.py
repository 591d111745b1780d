#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.
"""Encode batches as InfluxDB line protocol.

    <measurement>[,<tag>=<value>...] <field>=<value>[,<field>=<value>...] <time>

Batch tags are merged into every point's tags, with the point's own tags
taking precedence. Tags are written sorted by key, which is the order InfluxDB
prefers them in.
"""
import math
from datetime import datetime
from typing import List

from grade.lib.config import as_utc
from grade.lib.points import BatchPoints, FieldValue, Point


PRECISIONS = {"s": 1, "ms": 10 ** 3, "u": 10 ** 6, "ns": 10 ** 9}


def escape_measurement(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace(" ", "\\ ")


def escape_key(value: str) -> str:
    """Escape a tag key, tag value or field key."""
    return (
        value.replace("\\", "\\\\")
        .replace(",", "\\,")
        .replace("=", "\\=")
        .replace(" ", "\\ ")
        .replace("\n", "\\n")
    )


def format_field_value(value: FieldValue) -> str:
    # bool is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return "{}i".format(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("cannot encode non-finite field value {}".format(value))
        return repr(value)
    value = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return '"{}"'.format(value)


def format_time(time: datetime, precision: str) -> int:
    """Integer timestamp of time since the epoch in the given precision."""
    if precision not in PRECISIONS:
        raise ValueError('unknown precision "{}"'.format(precision))
    time = as_utc(time)
    seconds = int(time.timestamp())
    return seconds * PRECISIONS[precision] + (
        time.microsecond * PRECISIONS[precision] // 10 ** 6
    )


def encode_point(point: Point, batch: BatchPoints) -> str:
    tags = dict(batch.tags)
    tags.update(point.tags)

    key = escape_measurement(point.measurement)
    for name in sorted(tags):
        # InfluxDB rejects empty tag values
        if tags[name] == "":
            continue
        key += ",{}={}".format(escape_key(name), escape_key(tags[name]))

    fields = ",".join(
        "{}={}".format(escape_key(name), format_field_value(value))
        for name, value in point.fields.items()
    )
    if not fields:
        raise ValueError("point {} has no fields".format(key))

    return "{} {} {}".format(key, fields, format_time(batch.time, batch.precision))


def encode_batch(batch: BatchPoints) -> List[str]:
    """One line of line protocol per point, in batch order."""
    return [encode_point(point, batch) for point in batch.points]
