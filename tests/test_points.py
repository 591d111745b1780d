#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

from datetime import datetime, timezone
import unittest

from grade.lib.config import RunConfig
from grade.lib.parser import BenchmarkRecord, parse_report
from grade.lib.points import make_batch, make_fields, make_point


CONFIG = RunConfig(
    database="benchmarks",
    go_version="go1.21.4",
    timestamp=datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc),
    revision="R",
    hardware_id="ci-runner-1",
)


class TestProjection(unittest.TestCase):

    def test_nothing_measured(self):
        """A record without metrics has only revision and n"""
        record = BenchmarkRecord(package="p", name="Foo", n=10)
        self.assertDictEqual({"revision": "R", "n": 10}, make_fields(record, "R"))

    def test_everything_measured(self):
        """A record with every metric has six fields"""
        record = BenchmarkRecord(
            package="p",
            name="Foo",
            n=10,
            ns_per_op=1.5,
            mb_per_s=2.5,
            alloced_bytes_per_op=64,
            allocs_per_op=2,
        )
        fields = make_fields(record, "R")
        self.assertDictEqual(
            {
                "revision": "R",
                "n": 10,
                "ns_per_op": 1.5,
                "mb_per_s": 2.5,
                "alloced_bytes_per_op": 64,
                "allocs_per_op": 2,
            },
            fields,
        )
        self.assertIsInstance(fields["alloced_bytes_per_op"], int)
        self.assertIsInstance(fields["allocs_per_op"], int)

    def test_zero_metric(self):
        """A metric measured as zero is still emitted"""
        record = BenchmarkRecord(package="p", name="Foo", n=10, allocs_per_op=0)
        self.assertDictEqual(
            {"revision": "R", "n": 10, "allocs_per_op": 0}, make_fields(record, "R")
        )

    def test_point_tags(self):
        """Points are tagged with package, cpu count and name"""
        record = BenchmarkRecord(package="p", name="Foo", n=10, num_cpu=4)
        point = make_point("github.com/foo", record, "R")
        self.assertEqual("benchmarks", point.measurement)
        self.assertDictEqual(
            {"pkg": "github.com/foo", "ncpu": "4", "name": "Foo"}, point.tags
        )

    def test_report_to_point(self):
        """A parsed benchmark line turns into the expected point"""
        benchset = parse_report(
            "pkg: github.com/foo/bar\n"
            "BenchmarkFoo-4  100000  123 ns/op  45.6 MB/s\n"
        )
        batch = make_batch(CONFIG, benchset)
        self.assertEqual(1, len(batch.points))
        point = batch.points[0]
        self.assertDictEqual(
            {"pkg": "github.com/foo/bar", "ncpu": "4", "name": "Foo"}, point.tags
        )
        self.assertDictEqual(
            {"revision": "R", "n": 100000, "ns_per_op": 123, "mb_per_s": 45.6},
            point.fields,
        )


class TestBatch(unittest.TestCase):

    def test_two_packages(self):
        """Each package's benchmarks become points sharing the run tags"""
        benchset = parse_report(
            "pkg: a\n"
            "BenchmarkX-2  10  5 ns/op\n"
            "pkg: b\n"
            "BenchmarkY-2  20  6 ns/op\n"
        )
        batch = make_batch(CONFIG, benchset)

        self.assertEqual("benchmarks", batch.database)
        self.assertEqual("s", batch.precision)
        self.assertEqual(CONFIG.timestamp, batch.time)
        self.assertDictEqual({"goversion": "go1.21.4", "hwid": "ci-runner-1"}, batch.tags)
        self.assertListEqual(["a", "b"], [p.tags["pkg"] for p in batch.points])

    def test_order(self):
        """Points follow the order of packages and records"""
        benchset = {
            "z": [
                BenchmarkRecord(package="z", name="B", n=1),
                BenchmarkRecord(package="z", name="A", n=1),
            ],
            "a": [BenchmarkRecord(package="a", name="C", n=1)],
        }
        batch = make_batch(CONFIG, benchset)
        self.assertListEqual(
            [("z", "B"), ("z", "A"), ("a", "C")],
            [(p.tags["pkg"], p.tags["name"]) for p in batch.points],
        )

    def test_empty(self):
        """No benchmarks make an empty batch"""
        self.assertListEqual([], make_batch(CONFIG, {}).points)


if __name__ == "__main__":
    unittest.main()
