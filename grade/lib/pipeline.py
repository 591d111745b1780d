#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

import logging
from typing import Iterable, Optional, Union

from grade.lib.config import RunConfig
from grade.lib.parser import GoBenchParser, Parser
from grade.lib.points import BatchPoints, make_batch
from grade.lib.sink import WriteSink


logger = logging.getLogger(__name__)


def run(
    report: Union[str, Iterable[str]],
    sink: WriteSink,
    config: RunConfig,
    parser: Optional[Parser] = None,
) -> BatchPoints:
    """Process a benchmark report and write its results through sink.

    The config is validated before the report is read, and the whole report is
    parsed before anything is written. The batch is handed to the sink exactly
    once, and any exception the sink raises is passed up unchanged.

    Args:
        report (str or iterable of str): report text, or its lines (an open
                                         file works)
        sink (WriteSink): where to write the points
        config (RunConfig): settings applied to every point
        parser (Parser): parser for the report, defaults to GoBenchParser

    Returns:
        BatchPoints: the batch that was written

    Raises:
        ConfigError: the config is invalid
        ParseError: the report has a malformed benchmark line
    """
    config.validate()

    if isinstance(report, str):
        report = report.splitlines()
    parser = parser or GoBenchParser()
    benchset = parser.parse(report)

    batch = make_batch(config, benchset)
    logger.info(
        'Writing {} points for revision "{}" to "{}"'.format(
            len(batch.points), config.revision, config.database
        )
    )
    sink.write(batch)
    return batch
