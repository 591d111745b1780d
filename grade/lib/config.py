#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import yaml

from grade.lib.errors import GradeError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation(object):
    field: str
    reason: str


class ConfigError(GradeError):
    """Run configuration is invalid.

    The message is every violated field's reason, one per line.

    Attributes:
        violations (list of Violation): violated fields in check order
    """

    def __init__(self, violations: List[Violation]):
        super().__init__("\n".join(v.reason for v in violations))
        self.violations = violations


@dataclass(frozen=True)
class RunConfig(object):
    """Settings applied to every point written for one benchmark run."""

    database: str
    """database that the processed benchmark results are stored in"""

    go_version: str
    """tag value for the version of Go that ran the benchmarks"""

    timestamp: Optional[datetime]
    """time recorded for every result, typically the commit time of revision"""

    revision: str
    """revision of the code that was benchmarked, a SHA or tag name"""

    hardware_id: str
    """user-specified name of the hardware the benchmarks ran on"""

    sink: Dict[str, Any] = field(default_factory=dict)
    """name and options of the write sink, as loaded from a config file"""

    def violations(self) -> List[Violation]:
        violations = []

        if not self.database:
            violations.append(Violation("database", "Database cannot be empty"))

        if not self.go_version:
            violations.append(Violation("go_version", "Go version cannot be empty"))

        if self.timestamp is None or int(as_utc(self.timestamp).timestamp()) <= 0:
            violations.append(
                Violation("timestamp", "Timestamp must be greater than zero")
            )

        if not self.revision:
            violations.append(Violation("revision", "Revision cannot be empty"))

        if not self.hardware_id:
            violations.append(Violation("hardware_id", "Hardware ID cannot be empty"))

        return violations

    def validate(self):
        """Check every field, raising one ConfigError listing all problems."""
        violations = self.violations()
        if violations:
            raise ConfigError(violations)


def as_utc(timestamp: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp


def parse_timestamp(value) -> Optional[datetime]:
    """Convert Unix seconds, an ISO-8601 string or a datetime to a datetime."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        raise ValueError("invalid timestamp {!r}".format(value))
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    value = str(value).strip()
    if not value:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except ValueError:
        pass
    # yaml and most tools write UTC as a trailing Z
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


CONFIG_KEYS = ("database", "go_version", "timestamp", "revision", "hardware_id")


def config_from_dict(values: Dict[str, Any]) -> RunConfig:
    """Build a RunConfig from a dict of settings.

    Missing settings are left empty so that validation can report them all at
    once. The result is not validated.

    Raises:
        ConfigError: unknown keys or an unreadable timestamp
    """
    unknown = sorted(set(values) - set(CONFIG_KEYS) - {"sink"})
    if unknown:
        raise ConfigError(
            [Violation(key, 'Unknown setting "{}"'.format(key)) for key in unknown]
        )

    try:
        timestamp = parse_timestamp(values.get("timestamp"))
    except (ValueError, OverflowError, OSError) as e:
        raise ConfigError([Violation("timestamp", "Invalid timestamp: {}".format(e))])

    sink = values.get("sink") or {}
    if isinstance(sink, str):
        sink = {"name": sink}
    if not isinstance(sink, dict):
        raise ConfigError([Violation("sink", "Sink must be a name or a mapping")])

    return RunConfig(
        database=str(values.get("database") or ""),
        go_version=str(values.get("go_version") or ""),
        timestamp=timestamp,
        revision=str(values.get("revision") or ""),
        hardware_id=str(values.get("hardware_id") or ""),
        sink=dict(sink),
    )


def load_config(path: str, overrides: Optional[Dict[str, Any]] = None) -> RunConfig:
    """Load run settings from a YAML file.

    Args:
        path (str): path to the YAML config file
        overrides (dict): settings that take precedence over the file, None
                          values are ignored

    Raises:
        ConfigError: the file is not a mapping or holds unknown settings
    """
    logger.info('Loading config from "{}"'.format(path))
    with open(path) as config_file:
        values = yaml.safe_load(config_file) or {}

    if not isinstance(values, dict):
        raise ConfigError([Violation("config", "Config file must hold a mapping")])

    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    return config_from_dict(values)
