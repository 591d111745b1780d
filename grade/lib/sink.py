#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.
import json
import sys
from abc import ABCMeta, abstractmethod

from grade.lib.config import as_utc
from grade.lib.errors import GradeError
from grade.lib.line_protocol import encode_batch
from grade.lib.points import BatchPoints


class WriteError(GradeError):
    """The time-series database refused a batch.

    Attributes:
        status (int): HTTP status code of the response
        body (str): response body, usually an error message from the server
    """

    def __init__(self, status: int, body: str):
        super().__init__("write failed with status {}: {}".format(status, body.strip()))
        self.status = status
        self.body = body


class WriteSink(object, metaclass=ABCMeta):
    """A WriteSink durably records batches of points somewhere."""

    @abstractmethod
    def write(self, batch: BatchPoints):
        """Write the whole batch, raising an exception if it was not recorded."""
        pass

    def close(self):
        """Release any resources held by the sink."""
        pass


class StdoutSink(WriteSink):
    """Prints the batch as line protocol instead of writing it anywhere."""

    def __init__(self, output=None):
        self.output = output

    def write(self, batch: BatchPoints):
        output = self.output or sys.stdout
        for line in encode_batch(batch):
            print(line, file=output)


class JSONSink(WriteSink):
    """Prints one JSON object per point, with the batch tags merged in."""

    def __init__(self, output=None):
        self.output = output

    def write(self, batch: BatchPoints):
        output = self.output or sys.stdout
        time = as_utc(batch.time).isoformat()
        for point in batch.points:
            tags = dict(batch.tags)
            tags.update(point.tags)
            record = {
                "database": batch.database,
                "measurement": point.measurement,
                "tags": tags,
                "fields": point.fields,
                "time": time,
            }
            print(json.dumps(record, sort_keys=True), file=output, flush=True)
