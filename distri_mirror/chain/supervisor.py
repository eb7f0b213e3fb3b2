# distri_mirror/chain/supervisor.py
"""
Owns the live log subscription: connect, receive, resubscribe on error.

Bundles are handled one at a time in receipt order. Nothing is replayed
after a reconnect; a bundle seen twice is absorbed by the store's idempotent
upserts.
"""

from __future__ import annotations

import asyncio
import threading
from enum import Enum
from typing import List, Optional

from solana.rpc.commitment import Commitment, Finalized
from solders.pubkey import Pubkey

from distri_mirror.chain.classifier import classify
from distri_mirror.chain.dispatcher import EventDispatcher
from distri_mirror.chain.subscription import LogSource, LogSubscription
from distri_mirror.core.errors import DecodeError, TransportError, UnrecoverableConfigError
from distri_mirror.core.logging import log
from distri_mirror.models.events import Event

SOURCE = "Supervisor"


class SupervisorState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    SUBSCRIBED = "subscribed"
    RECEIVING = "receiving"


class SubscriptionSupervisor:
    def __init__(
        self,
        source: LogSource,
        dispatcher: EventDispatcher,
        program_id: Pubkey,
        commitment: Commitment = Finalized,
        reconnect_delay: float = 0.5,
        max_reconnect_delay: float = 5.0,
        connect_attempts: int = 5,
    ) -> None:
        self.source = source
        self.dispatcher = dispatcher
        self.program_id = program_id
        self.commitment = commitment
        self.reconnect_delay = reconnect_delay
        self.max_reconnect_delay = max_reconnect_delay
        self.connect_attempts = connect_attempts

        self.state = SupervisorState.DISCONNECTED
        self._subscription: Optional[LogSubscription] = None
        self._delay = reconnect_delay
        self._transport_ok = False
        self._connect_failures = 0

        self.processed = 0
        self.skipped = 0
        self.failed = 0
        self.reconnects = 0

        self.fatal = threading.Event()
        self.fatal_error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------
    async def step(self) -> None:
        """Advance by one transition."""
        if self.state in (SupervisorState.DISCONNECTED, SupervisorState.CONNECTING):
            await self._connect()
        elif self.state is SupervisorState.SUBSCRIBED:
            self._delay = self.reconnect_delay
            self.state = SupervisorState.RECEIVING
        else:
            await self._receive()

    async def run_forever(self) -> None:
        try:
            while True:
                await self.step()
        finally:
            await self._drop_subscription()

    async def _connect(self) -> None:
        self.state = SupervisorState.CONNECTING
        await self._drop_subscription()

        try:
            await self.source.connect()
        except TransportError as e:
            self._connect_failures += 1
            if not self._transport_ok and self._connect_failures >= self.connect_attempts:
                raise UnrecoverableConfigError(
                    f"log transport never came up after {self._connect_failures} attempts: {e}"
                ) from e
            log.warning(f"Connect failed: {e}", source=SOURCE)
            await self._backoff()
            return
        self._transport_ok = True
        self._connect_failures = 0

        try:
            self._subscription = await self.source.subscribe(self.program_id, self.commitment)
        except UnrecoverableConfigError:
            raise
        except Exception as e:
            log.error(f"LogsSubscribe error: {e}", source=SOURCE)
            await self._backoff()
            return
        self.state = SupervisorState.SUBSCRIBED

    async def _receive(self) -> None:
        try:
            bundle = await self._subscription.recv()
        except UnrecoverableConfigError:
            raise
        except Exception as e:
            log.warning(f"SubEvents error: {e}; resubscribing", source=SOURCE)
            self.reconnects += 1
            self.state = SupervisorState.CONNECTING
            return
        self.process_bundle(bundle)

    async def _backoff(self) -> None:
        await asyncio.sleep(self._delay)
        self._delay = min(self._delay * 2, self.max_reconnect_delay)

    async def _drop_subscription(self) -> None:
        sub, self._subscription = self._subscription, None
        if sub is not None:
            await sub.close()

    # ------------------------------------------------------------------
    # Per-bundle pipeline
    # ------------------------------------------------------------------
    def process_bundle(self, logs: List[str]) -> Optional[Event]:
        """Classifier -> codec -> dispatcher. Never raises."""
        found = classify(logs)
        if not found.applicable:
            self.skipped += 1
            log.debug("Log bundle carries no program event", source=SOURCE)
            return None
        try:
            event = self.dispatcher.dispatch(found.instruction, found.payload)
        except DecodeError as e:
            self.failed += 1
            log.warning(f"Skipping {found.instruction}: {e}", source=SOURCE)
            return None
        except Exception as e:
            self.failed += 1
            log.error(f"{found.instruction} dispatch failed: {e!r}", source=SOURCE)
            return None
        self.processed += 1
        log.info(f"{found.instruction} applied", source=SOURCE, payload=event)
        return event

    # ------------------------------------------------------------------
    # Background thread
    # ------------------------------------------------------------------
    def start(self) -> threading.Thread:
        """Run the receive loop on its own daemon thread until the process exits."""
        if self._thread is not None:
            raise RuntimeError("supervisor already started")
        self._thread = threading.Thread(target=self._thread_main, name="distri-log-supervisor", daemon=True)
        self._thread.start()
        return self._thread

    def _thread_main(self) -> None:
        try:
            asyncio.run(self.run_forever())
        except UnrecoverableConfigError as e:
            log.error(f"❌ Log subscription unavailable: {e}", source=SOURCE)
            self.fatal_error = e
            self.fatal.set()
        except Exception as e:
            log.error(f"❌ Supervisor crashed: {e!r}", source=SOURCE)
            self.fatal_error = e
            self.fatal.set()


__all__ = ["SubscriptionSupervisor", "SupervisorState"]
