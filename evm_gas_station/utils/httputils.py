import os
from typing import Optional

from aiohttp import ClientSession, ClientTimeout

PROXY_ENV = 'GAS_STATION_PROXY_URL'

# Singleton session shared by every upstream price fetcher.
CLIENT_SESSION: Optional[ClientSession] = None


async def setup_client_session(timeout: Optional[float] = None) -> ClientSession:
    """Create the process-wide session fetchers fall back to when none is injected.

    aiohttp recommends that only one ClientSession exist for the lifetime of an application.
    See: https://docs.aiohttp.org/en/stable/client_quickstart.html#make-a-request

    Upstream gas oracle requests go through GAS_STATION_PROXY_URL when set.
    `trust_env=True` is not used since it would also proxy APM traffic.
    """
    global CLIENT_SESSION  # pylint: disable=global-statement
    session_kwargs = {'proxy': os.environ.get(PROXY_ENV)}
    if timeout:
        session_kwargs['timeout'] = ClientTimeout(total=timeout)
    CLIENT_SESSION = ClientSession(**session_kwargs)
    return CLIENT_SESSION


async def teardown_client_session() -> None:
    global CLIENT_SESSION  # pylint: disable=global-statement
    if CLIENT_SESSION is not None:
        await CLIENT_SESSION.close()
