"""
NASA API client used by the proxy endpoints.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import asyncio
import json
import logging
import ssl
from urllib.parse import quote
from typing import Any, Dict, Optional

import aiohttp
import certifi

from mars_dashboard.config import Config
from mars_dashboard.exceptions import UpstreamError

_LOG = logging.getLogger(__name__)


class NASAClient:
    """NASA API client that injects the server-held API key."""

    def __init__(self, config: Config, session: Optional[aiohttp.ClientSession] = None):
        """Initialize NASA client.

        An externally supplied ``session`` is used as-is and never closed here.
        """
        self._config = config
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure aiohttp session exists with SSL verification."""
        if self._session is None or self._session.closed:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            ssl_context.check_hostname = True
            ssl_context.verify_mode = ssl.CERT_REQUIRED

            connector = aiohttp.TCPConnector(
                ssl=ssl_context,
                limit=10,
                limit_per_host=5,
                ttl_dns_cache=300,
                use_dns_cache=True,
                keepalive_timeout=30,
            )

            timeout = aiohttp.ClientTimeout(
                total=self._config.request_timeout,
                connect=5,
            )

            headers = {
                "User-Agent": "MarsDashboard/0.1 (aiohttp)",
                "Accept": "application/json, text/plain, */*",
            }

            self._session = aiohttp.ClientSession(
                timeout=timeout,
                connector=connector,
                headers=headers
            )
            self._owns_session = True

            _LOG.info("NASA HTTP session created with SSL verification")

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def _make_request(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make a GET request and return the decoded JSON body.

        Raises :class:`UpstreamError` for anything but a 200 JSON response.
        """
        await self._ensure_session()

        try:
            _LOG.debug("Making request to %s", url)

            async with self._session.get(url, params=params) as response:
                _LOG.debug("Response: HTTP %s from %s", response.status, url)

                if response.status != 200:
                    raise UpstreamError(
                        f"NASA API responded with HTTP {response.status}",
                        status_code=response.status,
                        url=url,
                    )

                content_type = response.headers.get("content-type", "")
                if "application/json" in content_type:
                    return await response.json()

                # Some NASA APIs return JSON without proper content-type
                text = await response.text()
                _LOG.debug("Non-JSON content type from %s, decoding body", url)
                return json.loads(text)

        except asyncio.TimeoutError as ex:
            _LOG.warning("Timeout for %s", url)
            raise UpstreamError("NASA API request timed out", url=url) from ex
        except aiohttp.ClientError as ex:
            _LOG.warning("Client error for %s: %s", url, ex)
            raise UpstreamError(f"NASA API request failed: {ex}", url=url) from ex
        except ValueError as ex:
            _LOG.warning("Invalid JSON from %s: %s", url, ex)
            raise UpstreamError("NASA API returned a non-JSON body", url=url) from ex

    async def fetch_apod(self) -> Dict[str, Any]:
        """Fetch today's Astronomy Picture of the Day payload."""
        _LOG.debug("Fetching APOD from NASA API...")
        params = {"api_key": self._config.api_key}
        data = await self._make_request(self._config.apod_url, params)
        _LOG.info("APOD data fetched: %s", str(data.get("title", ""))[:30] if isinstance(data, dict) else "")
        return data

    async def fetch_rover_photos(self, rover: str) -> Dict[str, Any]:
        """Fetch the photo archive of ``rover`` for the configured sol."""
        url = self._config.rover_photos_url.format(rover=quote(rover.lower(), safe=""))
        params = {"sol": self._config.sol, "api_key": self._config.api_key}

        _LOG.debug("Fetching Mars %s Sol %d data...", rover, self._config.sol)
        data = await self._make_request(url, params)

        if isinstance(data, dict):
            _LOG.info("Mars data fetched: %s Sol %d, %d images",
                      rover, self._config.sol, len(data.get("photos", [])))
        return data
