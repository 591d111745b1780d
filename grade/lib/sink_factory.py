#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

from grade.plugins.sinks import register_sinks

from .factory import BaseFactory
from .sink import JSONSink, StdoutSink, WriteSink


SinkFactory = BaseFactory(WriteSink)

SinkFactory.register("stdout", StdoutSink)
SinkFactory.register("json", JSONSink)
# register third-party sinks with the factory
register_sinks(SinkFactory)
