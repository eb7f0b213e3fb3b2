import logging

from distri_mirror.core.logging import log, render_payload
from distri_mirror.models.events import MachineEvent
from distri_mirror.models.mirror import Reward


def test_render_event_dataclass():
    assert render_payload(MachineEvent(owner="Own1", uuid="ab")) == "MachineEvent{owner=Own1 uuid=ab}"


def test_render_models_and_dicts_as_json():
    assert render_payload({"b": 1, "a": [2]}) == '{"a": [2], "b": 1}'
    assert '"pool": 9' in render_payload(Reward(period=1, pool=9))


def test_source_and_payload_on_one_line(caplog):
    caplog.set_level(logging.INFO, logger="distri_mirror")
    log.info("AddMachine applied", source="Supervisor", payload=MachineEvent(owner="Own1", uuid="ab"))
    assert "[Supervisor] AddMachine applied MachineEvent{owner=Own1 uuid=ab}" in caplog.text


def test_debug_suppressed_at_info(caplog):
    caplog.set_level(logging.INFO, logger="distri_mirror")
    log.debug("noise", source="Supervisor")
    assert "noise" not in caplog.text
