# Log line prefixes written by the program runtime
INSTRUCTION_PREFIX = "Program log: Instruction: "
DATA_PREFIX = "Program data: "

# Instructions whose logs carry a mirror event
ADD_MACHINE = "AddMachine"
REMOVE_MACHINE = "RemoveMachine"
MAKE_OFFER = "MakeOffer"
CANCEL_OFFER = "CancelOffer"
SUBMIT_TASK = "SubmitTask"
CLAIM = "Claim"
PLACE_ORDER = "PlaceOrder"
RENEW_ORDER = "RenewOrder"
REFUND_ORDER = "RefundOrder"
ORDER_COMPLETED = "OrderCompleted"
ORDER_FAILED = "OrderFailed"
REMOVE_ORDER = "RemoveOrder"

KNOWN_INSTRUCTIONS = frozenset({
    ADD_MACHINE, REMOVE_MACHINE, MAKE_OFFER, CANCEL_OFFER, SUBMIT_TASK, CLAIM,
    PLACE_ORDER, RENEW_ORDER, REFUND_ORDER, ORDER_COMPLETED, ORDER_FAILED, REMOVE_ORDER,
})

# Anchor prefixes every event and account body with an 8-byte discriminator
DISCRIMINATOR_SIZE = 8

# PDA seeds
MACHINE_SEED = b"machine"
ORDER_SEED = b"order"
REWARD_SEED = b"reward"
REWARD_MACHINE_SEED = b"reward-machine"
