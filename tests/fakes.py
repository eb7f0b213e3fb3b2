"""Test doubles for the chain, the mirror store and the log feed."""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel
from solders.pubkey import Pubkey

from distri_mirror.chain import pdas
from distri_mirror.chain.accounts import ProgramAccount, encode_account
from distri_mirror.chain.codec import encode_event
from distri_mirror.chain.constants import DATA_PREFIX, INSTRUCTION_PREFIX
from distri_mirror.core.errors import TransportError
from distri_mirror.models.mirror import Machine, Order, Reward, RewardMachine

PROGRAM_ID = Pubkey.new_unique()


def key() -> str:
    return str(Pubkey.new_unique())


def uid(n: int) -> str:
    return n.to_bytes(16, "big").hex()


def bundle(instruction: str, event) -> List[str]:
    return [
        "Program 11111111111111111111111111111111 invoke [1]",
        f"{INSTRUCTION_PREFIX}{instruction}",
        f"{DATA_PREFIX}{encode_event(event)}",
        "Program 11111111111111111111111111111111 success",
    ]


class FakeChain:
    def __init__(self, program_id: Pubkey):
        self.program_id = program_id
        self.accounts: Dict[str, bytes] = {}
        self.fetch_error: Optional[Exception] = None
        self.reads = 0

    def address_of(self, record: BaseModel) -> Pubkey:
        if isinstance(record, Machine):
            return pdas.machine_pda(self.program_id, record.owner, record.uuid)
        if isinstance(record, Order):
            return pdas.order_pda(self.program_id, record.buyer, record.order_id)
        if isinstance(record, Reward):
            return pdas.reward_pda(self.program_id, record.period)
        if isinstance(record, RewardMachine):
            return pdas.reward_machine_pda(self.program_id, record.period, record.owner, record.machine_id)
        raise TypeError(record)

    def put(self, record: BaseModel) -> str:
        address = str(self.address_of(record))
        self.accounts[address] = encode_account(record)
        return address

    def drop(self, record: BaseModel) -> None:
        self.accounts.pop(str(self.address_of(record)), None)

    def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        self.reads += 1
        return self.accounts.get(str(address))

    def fetch_all_program_accounts(self, commitment=None) -> List[ProgramAccount]:
        if self.fetch_error is not None:
            raise self.fetch_error
        return [ProgramAccount(addr, data) for addr, data in self.accounts.items()]


class RecordingStore:
    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        def record(*args):
            self.calls.append((name, *args))

        return record


class FakeSubscription:
    def __init__(self, items: List[Union[List[str], Exception]]):
        self.items = list(items)
        self.received = 0
        self.closed = False

    async def recv(self) -> List[str]:
        if not self.items:
            raise TransportError("feed exhausted")
        item = self.items.pop(0)
        if isinstance(item, Exception):
            raise item
        self.received += 1
        return item

    async def close(self) -> None:
        self.closed = True


class FakeLogSource:
    """Each subscribe() hands out the next scripted session; a None connect error is a success."""

    def __init__(self, sessions=None, connect_errors=None, subscribe_errors=None):
        self.sessions = list(sessions or [])
        self.connect_errors = list(connect_errors or [])
        self.subscribe_errors = list(subscribe_errors or [])
        self.connect_calls = 0
        self.subscribe_calls = 0
        self.subscriptions: List[FakeSubscription] = []

    async def connect(self) -> None:
        self.connect_calls += 1
        err = self.connect_errors.pop(0) if self.connect_errors else None
        if err is not None:
            raise err

    async def subscribe(self, program_id, commitment) -> FakeSubscription:
        self.subscribe_calls += 1
        if self.subscribe_errors:
            raise self.subscribe_errors.pop(0)
        sub = FakeSubscription(self.sessions.pop(0) if self.sessions else [])
        self.subscriptions.append(sub)
        return sub
