# distri_mirror/chain/subscription.py
"""Live ``logsSubscribe`` feed for the program over the Solana websocket API."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Deque, List, Optional, Protocol

from solana.rpc.commitment import Commitment
from solana.rpc.websocket_api import SolanaWsClientProtocol, SubscriptionError, connect
from solders.errors import SerdeJSONError
from solders.pubkey import Pubkey
from solders.rpc.config import RpcTransactionLogsFilterMentions
from solders.rpc.responses import LogsNotification, SubscriptionResult
from websockets.exceptions import InvalidURI, WebSocketException

from distri_mirror.config.rpc import redacted
from distri_mirror.core.errors import TransportError, UnrecoverableConfigError
from distri_mirror.core.logging import log

SOURCE = "LogSource"

_WS_ERRORS = (WebSocketException, OSError, asyncio.TimeoutError)
# solana-py parses every frame inside recv(): a rejected request raises
# SubscriptionError, an unparseable frame raises SerdeJSONError
_FRAME_ERRORS = _WS_ERRORS + (SubscriptionError, SerdeJSONError)


class LogSubscription(Protocol):
    async def recv(self) -> List[str]:
        """Block until the next log bundle; raise ``TransportError`` on failure."""

    async def close(self) -> None:
        ...


class LogSource(Protocol):
    async def connect(self) -> None:
        """Open the transport; ``UnrecoverableConfigError`` if it can never work."""

    async def subscribe(self, program_id: Pubkey, commitment: Commitment) -> LogSubscription:
        ...


async def _close_ws(ws: SolanaWsClientProtocol) -> None:
    try:
        await ws.close()
    except _WS_ERRORS as e:
        log.debug(f"Ignoring websocket close error: {e!r}", source=SOURCE)


class SolanaLogSubscription:
    def __init__(self, ws: SolanaWsClientProtocol, subscription_id: int, pending: Deque[List[str]]) -> None:
        self._ws = ws
        self.subscription_id = subscription_id
        self._pending = pending

    async def recv(self) -> List[str]:
        # one websocket frame may batch several notifications
        while not self._pending:
            try:
                msgs = await self._ws.recv()
            except _FRAME_ERRORS as e:
                raise TransportError(f"logs receive failed: {e!r}") from e
            _collect_logs(msgs, self._pending)
        return self._pending.popleft()

    async def close(self) -> None:
        try:
            await self._ws.logs_unsubscribe(self.subscription_id)
        except _FRAME_ERRORS as e:
            log.debug(f"Unsubscribe {self.subscription_id} failed: {e!r}", source=SOURCE)
        finally:
            await _close_ws(self._ws)


def _collect_logs(msgs, pending: Deque[List[str]]) -> None:
    for msg in msgs:
        if isinstance(msg, LogsNotification):
            pending.append(list(msg.result.value.logs))


class SolanaLogSource:
    """Opens websocket connections and log subscriptions mentioning the program."""

    def __init__(self, ws_url: str) -> None:
        self.ws_url = ws_url
        self._ws: Optional[SolanaWsClientProtocol] = None

    async def connect(self) -> None:
        stale, self._ws = self._ws, None
        if stale is not None:
            await _close_ws(stale)
        try:
            self._ws = await connect(self.ws_url)
        except InvalidURI as e:
            raise UnrecoverableConfigError(f"invalid websocket url {redacted(self.ws_url)}: {e}") from e
        except _WS_ERRORS as e:
            raise TransportError(f"cannot connect to {redacted(self.ws_url)}: {e!r}") from e
        log.info(f"Connected to {redacted(self.ws_url)}", source=SOURCE)

    async def subscribe(self, program_id: Pubkey, commitment: Commitment) -> SolanaLogSubscription:
        ws = self._ws
        if ws is None:
            raise TransportError("subscribe called without an open connection")
        pending: Deque[List[str]] = deque()
        try:
            await ws.logs_subscribe(RpcTransactionLogsFilterMentions(program_id), commitment)
            while True:
                msgs = await ws.recv()
                for msg in msgs:
                    if isinstance(msg, SubscriptionResult):
                        _collect_logs(msgs, pending)
                        log.info(f"Subscribed to logs of {program_id} (id={msg.result})", source=SOURCE)
                        return SolanaLogSubscription(ws, msg.result, pending)
        except SubscriptionError as e:
            raise TransportError(f"logsSubscribe rejected: {e.msg}") from e
        except _FRAME_ERRORS as e:
            raise TransportError(f"logsSubscribe failed: {e!r}") from e


__all__ = ["LogSource", "LogSubscription", "SolanaLogSource", "SolanaLogSubscription"]
