from __future__ import annotations

from typing import List

from solders.pubkey import Pubkey

from distri_mirror.chain.constants import (
    MACHINE_SEED,
    ORDER_SEED,
    REWARD_MACHINE_SEED,
    REWARD_SEED,
)

__all__ = [
    "find_program_address",
    "machine_pda",
    "order_pda",
    "reward_pda",
    "reward_machine_pda",
]


def find_program_address(seeds: List[bytes], program_id: Pubkey) -> Pubkey:
    pda, _ = Pubkey.find_program_address(seeds, program_id)
    return pda


def _period(period: int) -> bytes:
    return int(period).to_bytes(4, "little")


def machine_pda(program_id: Pubkey, owner: str, uuid: str) -> Pubkey:
    return find_program_address(
        [MACHINE_SEED, bytes(Pubkey.from_string(owner)), bytes.fromhex(uuid)],
        program_id,
    )


def order_pda(program_id: Pubkey, buyer: str, order_id: str) -> Pubkey:
    return find_program_address(
        [ORDER_SEED, bytes(Pubkey.from_string(buyer)), bytes.fromhex(order_id)],
        program_id,
    )


def reward_pda(program_id: Pubkey, period: int) -> Pubkey:
    return find_program_address([REWARD_SEED, _period(period)], program_id)


def reward_machine_pda(program_id: Pubkey, period: int, owner: str, machine_id: str) -> Pubkey:
    return find_program_address(
        [REWARD_MACHINE_SEED, _period(period), bytes(Pubkey.from_string(owner)), bytes.fromhex(machine_id)],
        program_id,
    )
