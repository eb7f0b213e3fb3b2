import pytest

from distri_mirror.chain.codec import encode_event
from distri_mirror.chain.dispatcher import EventDispatcher, ROUTES
from distri_mirror.chain.constants import KNOWN_INSTRUCTIONS
from distri_mirror.core.errors import DecodeError, UnknownInstruction
from distri_mirror.models.events import MachineEvent, OrderEvent, RewardEvent, TaskEvent
from fakes import key, uid

OWNER, BUYER, SELLER = key(), key(), key()
M1, O7 = uid(1), uid(7)

MACHINE = MachineEvent(owner=OWNER, uuid=M1)
TASK = TaskEvent(period=3, owner=OWNER, machine_id=M1)
REWARD = RewardEvent(period=3, owner=OWNER, machine_id=M1)
ORDER = OrderEvent(order_id=O7, buyer=BUYER, seller=SELLER, machine_id=M1)

EXPECTED = {
    "AddMachine": (MACHINE, [("add_machine", OWNER, M1)]),
    "RemoveMachine": (MACHINE, [("remove_machine", OWNER, M1)]),
    "MakeOffer": (MACHINE, [("refresh_machine", OWNER, M1)]),
    "CancelOffer": (MACHINE, [("refresh_machine", OWNER, M1)]),
    "SubmitTask": (TASK, [("add_reward", 3), ("add_reward_machine", 3, OWNER, M1)]),
    "Claim": (REWARD, [("refresh_machine", OWNER, M1), ("add_reward_machine", 3, OWNER, M1)]),
    "PlaceOrder": (ORDER, [("refresh_machine", SELLER, M1), ("add_order", O7, BUYER)]),
    "RenewOrder": (ORDER, [("refresh_order", O7, BUYER)]),
    "RefundOrder": (ORDER, [("refresh_machine", SELLER, M1), ("refresh_order", O7, BUYER)]),
    "OrderCompleted": (ORDER, [("refresh_machine", SELLER, M1), ("refresh_order", O7, BUYER)]),
    "OrderFailed": (ORDER, [("refresh_machine", SELLER, M1), ("refresh_order", O7, BUYER)]),
    "RemoveOrder": (ORDER, [("remove_order", O7)]),
}


def test_every_known_instruction_is_routed():
    assert set(ROUTES) == KNOWN_INSTRUCTIONS == set(EXPECTED)


@pytest.mark.parametrize("instruction", sorted(EXPECTED))
def test_mutations_in_order(store, instruction):
    event, calls = EXPECTED[instruction]
    decoded = EventDispatcher(store).dispatch(instruction, encode_event(event))
    assert decoded == event
    assert store.calls == calls


def test_add_machine_called_once(store):
    EventDispatcher(store).dispatch("AddMachine", encode_event(MACHINE))
    assert store.calls == [("add_machine", OWNER, M1)]


def test_bad_payload_issues_no_mutation(store):
    with pytest.raises(DecodeError):
        EventDispatcher(store).dispatch("PlaceOrder", "AAAA")
    assert store.calls == []


def test_unknown_instruction(store):
    with pytest.raises(UnknownInstruction):
        EventDispatcher(store).dispatch("Transfer", encode_event(MACHINE))
    assert store.calls == []
