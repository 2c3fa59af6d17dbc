#!/usr/bin/env python3
from typing import List, Optional, Tuple
import asyncio
import logging
from web3 import Web3
from web3.providers.websocket import WebsocketProvider

logger = logging.getLogger(__name__)


def is_websocket_url(url: str) -> bool:
    return url.startswith(("ws://", "wss://"))


def disconnect(w3: Web3, timeout_s: int = 5) -> None:
    """Close the socket a WebsocketProvider keeps open; HTTP providers hold none"""
    provider = w3.provider
    if not isinstance(provider, WebsocketProvider):
        return
    ws = getattr(provider.conn, "ws", None)
    if ws is None:
        return
    try:
        asyncio.run_coroutine_threadsafe(ws.close(), WebsocketProvider._loop).result(timeout=timeout_s)
    except Exception as e:
        logger.warning(f"Failed to close websocket {provider.endpoint_uri}: {e}")
    finally:
        provider.conn.ws = None


class EVMProviderPool:
    """Pick the first reachable RPC endpoint, in preference order"""

    def __init__(self, urls: List[str], request_timeout_s: int = 30):
        urls = [u for u in urls if u]
        if not urls:
            raise ValueError("EVMProviderPool requires at least one URL")
        self.urls = urls
        self.request_timeout_s = request_timeout_s

    def _build_web3(self, index: int) -> Web3:
        url = self.urls[index]
        if is_websocket_url(url):
            return Web3(Web3.WebsocketProvider(url, websocket_timeout=self.request_timeout_s))
        return Web3(Web3.HTTPProvider(url, request_kwargs={"timeout": self.request_timeout_s}))

    def ensure_connected(self) -> Tuple[Web3, str]:
        last_error: Optional[Exception] = None
        for i, url in enumerate(self.urls):
            try:
                w3 = self._build_web3(i)
                _ = w3.eth.block_number
                return w3, url
            except Exception as e:
                logger.warning(f"RPC endpoint {url} unreachable: {e}")
                last_error = e
        if last_error:
            raise ConnectionError(f"No EVM RPC endpoints are reachable: {last_error}")
        raise ConnectionError("No EVM RPC endpoints are reachable")
