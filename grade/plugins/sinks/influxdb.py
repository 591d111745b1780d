#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

import logging
from typing import Optional

import httpx

from grade.lib.line_protocol import encode_batch
from grade.lib.points import BatchPoints
from grade.lib.sink import WriteError, WriteSink


logger = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:8086"


class InfluxDBSink(WriteSink):
    """Writes batches to the InfluxDB 1.x HTTP write endpoint.

    The whole batch goes out in a single request, so it is either stored
    completely or not at all. Nothing is retried.

    Options:
        url (str): base URL of the InfluxDB server
        username (str): user to authenticate as, if any
        password (str): password for username
        timeout (float): seconds to wait for the server before giving up
        retention_policy (str): retention policy to write into, defaults to
                                the database's default policy
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 10.0,
        retention_policy: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.retention_policy = retention_policy
        auth = (username, password or "") if username else None
        self.client = httpx.Client(
            base_url=self.url, auth=auth, timeout=timeout, transport=transport
        )

    def write(self, batch: BatchPoints):
        if not batch.points:
            logger.warning('No points to write to "{}"'.format(batch.database))
            return

        params = {"db": batch.database, "precision": batch.precision}
        if self.retention_policy:
            params["rp"] = self.retention_policy
        body = "\n".join(encode_batch(batch)) + "\n"

        logger.info(
            'Writing {} points to "{}" at {}'.format(
                len(batch.points), batch.database, self.url
            )
        )
        response = self.client.post(
            "/write",
            params=params,
            content=body.encode("utf-8"),
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )
        if response.status_code >= 400:
            logger.error(
                "InfluxDB rejected the batch ({}): {}".format(
                    response.status_code, response.text
                )
            )
            raise WriteError(response.status_code, response.text)

    def close(self):
        self.client.close()
