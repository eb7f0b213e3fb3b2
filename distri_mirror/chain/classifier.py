from __future__ import annotations

from typing import Iterable, NamedTuple, Optional

from distri_mirror.chain.constants import DATA_PREFIX, INSTRUCTION_PREFIX, KNOWN_INSTRUCTIONS


class LogClassification(NamedTuple):
    instruction: Optional[str]
    payload: Optional[str]

    @property
    def applicable(self) -> bool:
        return bool(self.instruction) and bool(self.payload)


def classify(logs: Iterable[str]) -> LogClassification:
    """
    Pick the instruction and event payload out of one transaction's logs.

    The first instruction line naming a known instruction wins, since other
    programs invoked by the same transaction log their own instructions. The
    first data line wins independently of where it sits.
    """
    instruction: Optional[str] = None
    payload: Optional[str] = None
    for line in logs:
        if instruction is None and line.startswith(INSTRUCTION_PREFIX):
            name = line[len(INSTRUCTION_PREFIX):]
            if name in KNOWN_INSTRUCTIONS:
                instruction = name
                continue
        if payload is None and line.startswith(DATA_PREFIX):
            payload = line[len(DATA_PREFIX):]
    return LogClassification(instruction, payload)


__all__ = ["LogClassification", "classify"]
