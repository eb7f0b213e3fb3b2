from enum import IntEnum


class MachineStatus(IntEnum):
    IDLE = 0
    FOR_RENT = 1
    RENTING = 2

    @property
    def label(self) -> str:
        return {0: "Idle", 1: "ForRent", 2: "Renting"}[self.value]


class OrderStatus(IntEnum):
    TRAINING = 0
    COMPLETED = 1
    FAILED = 2
    REFUNDED = 3

    @property
    def label(self) -> str:
        return {0: "Training", 1: "Completed", 2: "Failed", 3: "Refunded"}[self.value]

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.TRAINING


__all__ = ["MachineStatus", "OrderStatus"]
