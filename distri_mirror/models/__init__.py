from .events import Event, MachineEvent, OrderEvent, RewardEvent, TaskEvent
from .mirror import Machine, Order, Reward, RewardMachine
from .status import MachineStatus, OrderStatus

__all__ = [
    "Event",
    "MachineEvent",
    "OrderEvent",
    "RewardEvent",
    "TaskEvent",
    "Machine",
    "Order",
    "Reward",
    "RewardMachine",
    "MachineStatus",
    "OrderStatus",
]
