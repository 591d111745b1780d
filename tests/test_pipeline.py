#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

import dataclasses
from datetime import datetime, timezone
import io
import unittest
from unittest.mock import MagicMock

from grade import ConfigError, ParseError, RunConfig, WriteError, run
from grade.lib.sink import WriteSink


CONFIG = RunConfig(
    database="benchmarks",
    go_version="go1.21.4",
    timestamp=datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc),
    revision="5f1c2e9",
    hardware_id="ci-runner-1",
)

REPORT = """\
goos: linux
pkg: github.com/foo/a
BenchmarkFoo-4   	  100000	       123 ns/op	  45.6 MB/s
PASS
ok  	github.com/foo/a	1.2s
pkg: github.com/foo/b
BenchmarkBar-4   	     500	      9000 ns/op	     128 B/op	       4 allocs/op
PASS
ok  	github.com/foo/b	2.3s
"""


class TestRun(unittest.TestCase):

    def setUp(self):
        self.sink = MagicMock(spec=WriteSink)

    def test_run(self):
        """A report is written to the sink as one batch"""
        batch = run(REPORT, self.sink, CONFIG)

        self.sink.write.assert_called_once_with(batch)
        self.assertEqual("benchmarks", batch.database)
        self.assertEqual("s", batch.precision)
        self.assertEqual(CONFIG.timestamp, batch.time)
        self.assertDictEqual(
            {"goversion": "go1.21.4", "hwid": "ci-runner-1"}, batch.tags
        )
        self.assertEqual(2, len(batch.points))

        foo, bar = batch.points
        self.assertDictEqual(
            {"pkg": "github.com/foo/a", "ncpu": "4", "name": "Foo"}, foo.tags
        )
        self.assertDictEqual(
            {"revision": "5f1c2e9", "n": 100000, "ns_per_op": 123, "mb_per_s": 45.6},
            foo.fields,
        )
        self.assertDictEqual(
            {"pkg": "github.com/foo/b", "ncpu": "4", "name": "Bar"}, bar.tags
        )
        self.assertDictEqual(
            {
                "revision": "5f1c2e9",
                "n": 500,
                "ns_per_op": 9000,
                "alloced_bytes_per_op": 128,
                "allocs_per_op": 4,
            },
            bar.fields,
        )

    def test_run_file(self):
        """The report can be an open file"""
        batch = run(io.StringIO(REPORT), self.sink, CONFIG)
        self.assertEqual(2, len(batch.points))
        self.assertEqual(1, self.sink.write.call_count)

    def test_invalid_config(self):
        """An invalid config stops the run before parsing"""
        config = dataclasses.replace(CONFIG, database="", hardware_id="")
        parser = MagicMock()

        with self.assertRaises(ConfigError) as e:
            run(REPORT, self.sink, config, parser=parser)
        self.assertEqual(
            ["database", "hardware_id"], [v.field for v in e.exception.violations]
        )
        parser.parse.assert_not_called()
        self.assertEqual(0, self.sink.write.call_count)

    def test_parse_error(self):
        """An unknown unit fails the run and nothing is written"""
        report = REPORT.replace("45.6 MB/s", "45.6 MiB/s")

        with self.assertRaises(ParseError):
            run(report, self.sink, CONFIG)
        self.assertEqual(0, self.sink.write.call_count)

    def test_infinite_value(self):
        """An overflowing metric value fails parsing, not the write"""
        report = REPORT.replace("123 ns/op", "1e999 ns/op")

        with self.assertRaises(ParseError) as e:
            run(report, self.sink, CONFIG)
        self.assertIn("invalid ns/op", e.exception.reason)
        self.assertEqual(0, self.sink.write.call_count)

    def test_write_error(self):
        """Sink errors are passed through unchanged"""
        error = WriteError(500, "timeout")
        self.sink.write.side_effect = error

        with self.assertRaises(WriteError) as e:
            run(REPORT, self.sink, CONFIG)
        self.assertIs(error, e.exception)
        self.assertEqual(1, self.sink.write.call_count)

    def test_empty_report(self):
        """A report without benchmarks writes an empty batch"""
        batch = run("PASS\n", self.sink, CONFIG)
        self.assertListEqual([], batch.points)
        self.sink.write.assert_called_once_with(batch)


if __name__ == "__main__":
    unittest.main()
