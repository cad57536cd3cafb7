# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Shared HTTP client construction.

Every outbound request made by noticekit goes through
:func:`http_client`, which applies one set of connection limits and
timeouts and follows redirects. Tests pass an
:class:`httpx.MockTransport` as *transport* instead of patching.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Final

import httpx

__all__ = [
    'DEFAULT_POOL_SIZE',
    'DEFAULT_TIMEOUT',
    'USER_AGENT',
    'http_client',
]

#: Default maximum number of open connections.
DEFAULT_POOL_SIZE: Final[int] = 10

#: Default per-request timeout in seconds.
DEFAULT_TIMEOUT: Final[float] = 10.0

USER_AGENT: Final[str] = 'noticekit'


@asynccontextmanager
async def http_client(
    *,
    pool_size: int = DEFAULT_POOL_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield an :class:`httpx.AsyncClient` with noticekit's defaults.

    Args:
        pool_size: Maximum number of open connections.
        timeout: Per-request timeout in seconds.
        transport: Transport to use instead of the network.
    """
    limits = httpx.Limits(max_connections=pool_size, max_keepalive_connections=pool_size)
    async with httpx.AsyncClient(
        limits=limits,
        timeout=httpx.Timeout(timeout),
        headers={'User-Agent': USER_AGENT},
        follow_redirects=True,
        transport=transport,
    ) as client:
        yield client
