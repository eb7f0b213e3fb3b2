# distri_mirror/models/mirror.py
"""Rows of the mirror tables, decoded from program accounts."""

from pydantic import BaseModel, ConfigDict, constr

from distri_mirror.models.status import MachineStatus, OrderStatus


class Machine(BaseModel):
    """Full representation of a row in the ``machines`` table."""

    owner: constr(min_length=1)
    uuid: constr(min_length=1)
    address: str = ""
    metadata: str = ""
    status: MachineStatus = MachineStatus.IDLE
    price: int = 0
    max_duration: int = 0
    disk: int = 0
    completed_count: int = 0
    failed_count: int = 0
    score: int = 0
    claimed_periods: int = 0
    order_pda: str = ""

    model_config = ConfigDict(from_attributes=True)


class Order(BaseModel):
    """Full representation of a row in the ``orders`` table."""

    order_id: constr(min_length=1)
    buyer: str
    seller: str
    machine_id: str
    address: str = ""
    price: int = 0
    duration: int = 0
    total: int = 0
    metadata: str = ""
    status: OrderStatus = OrderStatus.TRAINING
    order_time: int = 0
    start_time: int = 0
    refund_time: int = 0

    model_config = ConfigDict(from_attributes=True)


class Reward(BaseModel):
    period: int
    address: str = ""
    start_time: int = 0
    pool: int = 0
    machine_num: int = 0
    task_num: int = 0

    model_config = ConfigDict(from_attributes=True)


class RewardMachine(BaseModel):
    period: int
    owner: str
    machine_id: str
    address: str = ""
    task_num: int = 0
    claimed: bool = False

    model_config = ConfigDict(from_attributes=True)


__all__ = ["Machine", "Order", "Reward", "RewardMachine"]
