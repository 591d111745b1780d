#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

from grade.lib.config import ConfigError, RunConfig, Violation, load_config
from grade.lib.errors import GradeError
from grade.lib.parser import (
    BenchmarkRecord,
    GoBenchParser,
    Measured,
    ParseError,
    parse_report,
)
from grade.lib.pipeline import run
from grade.lib.points import BatchPoints, Point, make_batch, make_fields, make_point
from grade.lib.sink import WriteError, WriteSink


__all__ = [
    "BatchPoints",
    "BenchmarkRecord",
    "ConfigError",
    "GoBenchParser",
    "GradeError",
    "Measured",
    "ParseError",
    "Point",
    "RunConfig",
    "Violation",
    "WriteError",
    "WriteSink",
    "load_config",
    "make_batch",
    "make_fields",
    "make_point",
    "parse_report",
    "run",
]
