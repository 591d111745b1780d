#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.
import dataclasses
import enum
import logging
import math
import re
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from grade.lib.errors import GradeError


logger = logging.getLogger(__name__)

HEADER_REGEX = re.compile(r"^pkg:\s+(\S+)\s*$")
# "ok  \tgithub.com/foo/bar\t1.234s" or "FAIL\tgithub.com/foo/bar\t0.01s"
TRAILER_REGEX = re.compile(r"^(?:ok|FAIL)\s+(\S+)(?:\s|$)")
UINT_REGEX = re.compile(r"^\d+$")
FLOAT_REGEX = re.compile(r"^(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
NAME_PREFIX = "Benchmark"


class Measured(enum.Flag):
    """Which of the optional metrics were present on a benchmark line."""

    NONE = 0
    NS_PER_OP = enum.auto()
    MB_PER_S = enum.auto()
    ALLOCED_BYTES_PER_OP = enum.auto()
    ALLOCS_PER_OP = enum.auto()


@dataclass(frozen=True)
class BenchmarkRecord(object):
    package: str

    name: str
    """benchmark name without the Benchmark prefix or the -N cpu suffix"""

    n: int
    """number of loop iterations the benchmark ran"""

    num_cpu: int = 1

    ns_per_op: Optional[float] = None
    mb_per_s: Optional[float] = None
    alloced_bytes_per_op: Optional[int] = None
    allocs_per_op: Optional[int] = None

    @property
    def measured(self) -> Measured:
        measured = Measured.NONE
        for unit in UNITS.values():
            if getattr(self, unit.attr) is not None:
                measured |= unit.flag
        return measured


@dataclass(frozen=True)
class Unit(object):
    attr: str
    flag: Measured
    integral: bool


UNITS = {
    "ns/op": Unit("ns_per_op", Measured.NS_PER_OP, False),
    "MB/s": Unit("mb_per_s", Measured.MB_PER_S, False),
    "B/op": Unit("alloced_bytes_per_op", Measured.ALLOCED_BYTES_PER_OP, True),
    "allocs/op": Unit("allocs_per_op", Measured.ALLOCS_PER_OP, True),
}


class ParseError(GradeError):
    """A benchmark line could not be parsed.

    Attributes:
        lineno (int): 1-based line number in the report
        line (str): offending line
        reason (str): what was wrong with it
    """

    def __init__(self, lineno: int, line: str, reason: str):
        super().__init__(f"line {lineno}: {reason}: {line.strip()!r}")
        self.lineno = lineno
        self.line = line
        self.reason = reason


class Parser(object, metaclass=ABCMeta):
    """Parser turns the text of a benchmark report into benchmark records."""

    @abstractmethod
    def parse(self, lines: Iterable[str]) -> Dict[str, List[BenchmarkRecord]]:
        """Take report lines and group the benchmark records by package."""
        pass


class GoBenchParser(Parser):
    """Parses the output of `go test -run=^$ -bench=. ./...`.

    Packages are identified by the `pkg:` header that precedes a package's
    benchmarks. Older toolchains do not print the header, in which case the
    benchmarks are attributed to the package named on the `ok` (or `FAIL`)
    line that ends the package's output. Anything that is neither a header, a
    trailer nor a benchmark result is ignored, since build and test logging is
    commonly interleaved with the results.

    A benchmark line that cannot be parsed fails the whole report.
    """

    def parse(self, lines: Iterable[str]) -> Dict[str, List[BenchmarkRecord]]:
        benchset: Dict[str, List[BenchmarkRecord]] = {}
        package: Optional[str] = None
        # records seen outside of a pkg: section, waiting for a trailer
        pending: List[BenchmarkRecord] = []
        pending_lineno = 0

        lineno = 0
        for lineno, line in enumerate(lines, start=1):
            line = line.rstrip("\r\n")

            header = HEADER_REGEX.match(line)
            if header:
                package = header.group(1)
                logger.debug('Line {}: entering package "{}"'.format(lineno, package))
                continue

            trailer = TRAILER_REGEX.match(line)
            if trailer:
                if pending:
                    name = trailer.group(1)
                    logger.debug(
                        "Attributing {} benchmarks to {}".format(len(pending), name)
                    )
                    benchset.setdefault(name, []).extend(
                        dataclasses.replace(r, package=name) for r in pending
                    )
                    pending = []
                package = None
                continue

            record = self.parse_line(lineno, line, package or "")
            if record is None:
                continue
            if package is None:
                if not pending:
                    pending_lineno = lineno
                pending.append(record)
            else:
                benchset.setdefault(package, []).append(record)

        if pending:
            raise ParseError(
                pending_lineno,
                "{}{}".format(NAME_PREFIX, pending[0].name),
                "benchmark results without a package header or trailer",
            )

        logger.info(
            "Parsed {} benchmarks in {} packages from {} lines".format(
                sum(len(records) for records in benchset.values()),
                len(benchset),
                lineno,
            )
        )
        return benchset

    @staticmethod
    def parse_line(lineno: int, line: str, package: str) -> Optional[BenchmarkRecord]:
        """Parse a single benchmark result line.

        Returns None when the line is not a benchmark result at all.

        Raises:
            ParseError: the line looks like a benchmark result but is malformed
        """
        fields = line.split()
        if not fields or not fields[0].startswith(NAME_PREFIX):
            return None
        # go test echoes the bare name before a benchmark's log output
        if len(fields) == 1:
            return None

        name = fields[0][len(NAME_PREFIX):]
        num_cpu = 1
        i = name.rfind("-")
        if i >= 0 and UINT_REGEX.match(name[i + 1:]):
            num_cpu = int(name[i + 1:])
            name = name[:i]
        if not name:
            raise ParseError(lineno, line, "empty benchmark name")

        if not UINT_REGEX.match(fields[1]):
            raise ParseError(
                lineno, line, 'invalid iteration count "{}"'.format(fields[1])
            )
        n = int(fields[1])

        metrics = fields[2:]
        if len(metrics) % 2 != 0:
            raise ParseError(
                lineno, line, 'value "{}" has no unit'.format(metrics[-1])
            )

        values = {}
        for value, label in zip(metrics[::2], metrics[1::2]):
            unit = UNITS.get(label)
            if unit is None:
                raise ParseError(lineno, line, 'unknown unit "{}"'.format(label))
            if unit.attr in values:
                raise ParseError(lineno, line, 'duplicate "{}" metric'.format(label))
            if unit.integral:
                if not UINT_REGEX.match(value):
                    raise ParseError(
                        lineno, line, 'invalid {} value "{}"'.format(label, value)
                    )
                values[unit.attr] = int(value)
            else:
                # overflowing literals such as 1e999 become inf
                if not FLOAT_REGEX.match(value) or not math.isfinite(float(value)):
                    raise ParseError(
                        lineno, line, 'invalid {} value "{}"'.format(label, value)
                    )
                values[unit.attr] = float(value)

        return BenchmarkRecord(
            package=package, name=name, n=n, num_cpu=num_cpu, **values
        )


def parse_report(text: str) -> Dict[str, List[BenchmarkRecord]]:
    """Parse the full text of a benchmark report."""
    return GoBenchParser().parse(text.splitlines())
