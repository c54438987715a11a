# core/http_client.py
import asyncio
import logging
import httpx
from weakref import WeakKeyDictionary

logger = logging.getLogger(__name__)

# Check if HTTP/2 is supported (requires 'h2' package)
try:
    import h2  # noqa: F401
    HTTP2_ENABLED = True
except ImportError:
    HTTP2_ENABLED = False

DEFAULT_READ_TIMEOUT = 120.0

# One client per event loop
_clients: WeakKeyDictionary = WeakKeyDictionary()


def agent_timeout(read_timeout: float) -> httpx.Timeout:
    """
    Timeouts for long-lived agent streams.

    `read` bounds the gap between two streamed chunks, not the whole response,
    so it tracks the agent stream deadline; connection setup stays short.
    """
    return httpx.Timeout(connect=10.0, read=read_timeout, write=10.0, pool=10.0)


def get_client(read_timeout: float = DEFAULT_READ_TIMEOUT) -> httpx.AsyncClient:
    """
    Returns the AsyncClient bound to the current running event loop.

    The Anthropic SDK is handed this client so every agent turn reuses one
    connection pool. `read_timeout` only applies when the client is created.
    """
    loop = asyncio.get_running_loop()

    client = _clients.get(loop)
    if client is not None:
        return client

    # A planning request holds one connection for a whole tool-use loop;
    # keep-alive covers back-to-back turns of the same run
    limits = httpx.Limits(
        max_connections=50,
        max_keepalive_connections=10
    )

    client = httpx.AsyncClient(
        timeout=agent_timeout(read_timeout),
        limits=limits,
        http2=HTTP2_ENABLED,
    )

    _clients[loop] = client
    return client


async def close_client():
    """Close every shared client; called from the app lifespan on shutdown."""
    for client in list(_clients.values()):
        try:
            await client.aclose()
        except Exception:
            logger.warning("Failed to close HTTP client", exc_info=True)

    _clients.clear()
