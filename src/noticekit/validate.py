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

"""Check that every dependency URL is reachable.

Each URL is probed with ``HEAD``; servers that reject the method get a
``GET`` instead::

    HEAD url ──→ 2xx ─────────────────────────→ ok
       │
       ├──→ 405 / 501 ──→ GET url ──→ 2xx ───→ ok
       │                     └─────→ other ──→ failure
       └──→ other status / transport error / invalid URL ──→ failure

Redirects are followed before the status is judged. All URLs are
checked concurrently (bounded by a semaphore) and every failure is
reported at once in a single :class:`~noticekit.errors.UrlValidationError`.

Usage::

    from noticekit.validate import validate_urls

    validate_urls(deps)  # raises UrlValidationError
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Final

import httpx

from noticekit.dependency import DependencyList
from noticekit.errors import UrlValidationError
from noticekit.logging import get_logger
from noticekit.net import DEFAULT_TIMEOUT, http_client

__all__ = [
    'DEFAULT_CONCURRENCY',
    'check_url',
    'dependency_urls',
    'validate_urls',
    'validate_urls_async',
]

log = get_logger('noticekit.validate')

#: Default maximum number of URLs probed at the same time.
DEFAULT_CONCURRENCY: Final[int] = 8

# Status codes meaning "the server does not do HEAD".
_HEAD_UNSUPPORTED: Final[frozenset[int]] = frozenset({405, 501})


def dependency_urls(deps: DependencyList) -> list[str]:
    """Return the distinct non-empty URLs of *deps*, in list order."""
    return list(dict.fromkeys(dep.url for dep in deps.all() if dep.url))


async def check_url(client: httpx.AsyncClient, url: str) -> str:
    """Probe *url* and return ``""`` if reachable, else a short reason."""
    try:
        resp = await client.head(url)
        if resp.status_code in _HEAD_UNSUPPORTED:
            resp = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        return f'{type(exc).__name__}: {exc}' if str(exc) else type(exc).__name__
    if resp.is_success:
        return ''
    return f'HTTP {resp.status_code}'


async def validate_urls_async(
    urls: Iterable[str],
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Check every URL in *urls*.

    Args:
        urls: URLs to probe.
        concurrency: Maximum number of concurrent probes.
        timeout: Per-request timeout in seconds.
        transport: Transport to use instead of the network.

    Raises:
        UrlValidationError: At least one URL is unreachable.
    """
    urls = list(dict.fromkeys(urls))
    sem = asyncio.Semaphore(concurrency)
    failures: dict[str, str] = {}

    async with http_client(pool_size=concurrency, timeout=timeout, transport=transport) as client:

        async def _do_one(url: str) -> None:
            async with sem:
                reason = await check_url(client, url)
            if reason:
                log.warning('url_unreachable', url=url, reason=reason)
                failures[url] = reason
            else:
                log.debug('url_ok', url=url)

        await asyncio.gather(*(_do_one(url) for url in urls))

    log.info('urls_validated', total=len(urls), failed=len(failures))
    if failures:
        raise UrlValidationError(failures)


def validate_urls(
    deps: DependencyList,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Synchronous wrapper around :func:`validate_urls_async` for a dependency list.

    Raises:
        UrlValidationError: At least one dependency URL is unreachable.
    """
    asyncio.run(
        validate_urls_async(
            dependency_urls(deps),
            concurrency=concurrency,
            timeout=timeout,
            transport=transport,
        )
    )
