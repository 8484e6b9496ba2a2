from __future__ import annotations

import logging
from typing import Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout

logger = logging.getLogger(__name__)


class HttpClient:
    """
    Fetch capability handed to adapters.
    No retries: a failed request raises and the caller decides what to do.
    """

    def __init__(
        self,
        session: ClientSession,
        *,
        timeout: float = 15.0,
        user_agent: Optional[str] = None,
    ) -> None:
        self.session = session
        self.timeout = timeout
        self.user_agent = user_agent

    async def get_text(self, url: str) -> str:
        """
        GET a URL and return the body text. The response is released before returning.
        Raises aiohttp.ClientError (including ClientResponseError on non-2xx statuses).
        """
        headers = {}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent

        async with self.session.get(url, headers=headers, timeout=ClientTimeout(total=self.timeout)) as resp:
            resp.raise_for_status()
            text = await resp.text()
        logger.debug("GET %s -> %s bytes", url, len(text))
        return text


def create_session() -> ClientSession:
    """
    Create a shared aiohttp ClientSession.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    connector = aiohttp.TCPConnector(limit=10)
    return aiohttp.ClientSession(connector=connector)
