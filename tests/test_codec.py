import base64

import pytest

from distri_mirror.chain.codec import decode_event, encode_event
from distri_mirror.core.errors import DecodeError, MalformedPayload, PayloadTooShort
from distri_mirror.models.events import MachineEvent, OrderEvent, RewardEvent, TaskEvent
from fakes import key, uid


def test_decode_machine_event():
    owner = key()
    payload = encode_event(MachineEvent(owner=owner, uuid=uid(1)))
    event = decode_event(MachineEvent, payload)
    assert event == MachineEvent(owner=owner, uuid=uid(1))


def test_decode_order_event_field_order():
    buyer, seller = key(), key()
    ev = OrderEvent(order_id=uid(7), buyer=buyer, seller=seller, machine_id=uid(1))
    decoded = decode_event(OrderEvent, encode_event(ev))
    assert decoded.order_id == uid(7)
    assert decoded.buyer == buyer
    assert decoded.seller == seller
    assert decoded.machine_id == uid(1)


def test_task_and_reward_events_share_layout():
    ev = TaskEvent(period=42, owner=key(), machine_id=uid(3))
    as_reward = decode_event(RewardEvent, encode_event(ev))
    assert (as_reward.period, as_reward.owner, as_reward.machine_id) == (42, ev.owner, ev.machine_id)


def test_discriminator_is_skipped_not_checked():
    body = base64.b64decode(encode_event(MachineEvent(owner=key(), uuid=uid(9))))[8:]
    payload = base64.b64encode(b"\xff" * 8 + body).decode()
    assert decode_event(MachineEvent, payload).uuid == uid(9)


@pytest.mark.parametrize("size", range(8))
def test_short_payload_rejected(size):
    payload = base64.b64encode(b"\x01" * size).decode()
    with pytest.raises(PayloadTooShort):
        decode_event(MachineEvent, payload)


def test_malformed_base64_rejected():
    with pytest.raises(MalformedPayload):
        decode_event(OrderEvent, "not base64 at all!")


def test_truncated_body_rejected():
    raw = base64.b64decode(encode_event(MachineEvent(owner=key(), uuid=uid(2))))
    with pytest.raises(DecodeError):
        decode_event(MachineEvent, base64.b64encode(raw[:20]).decode())


def test_decode_errors_share_a_base():
    assert issubclass(PayloadTooShort, DecodeError)
    assert issubclass(MalformedPayload, DecodeError)
