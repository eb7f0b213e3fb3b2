from distri_mirror.models.mirror import Machine, Order, Reward
from fakes import key, uid

U64_MAX = 2**64 - 1


def test_u64_amounts_survive_storage(locker):
    owner, buyer = key(), key()
    assert locker.machines.upsert_machine(Machine(owner=owner, uuid=uid(1), price=U64_MAX))
    assert locker.orders.upsert_order(
        Order(order_id=uid(2), buyer=buyer, seller=owner, machine_id=uid(1), price=2**63, total=U64_MAX)
    )
    assert locker.rewards.upsert_reward(Reward(period=1, pool=U64_MAX))

    assert locker.machines.get_machine(owner, uid(1)).price == U64_MAX
    order = locker.orders.get_order(uid(2))
    assert (order.price, order.total) == (2**63, U64_MAX)
    assert locker.rewards.get_reward(1).pool == U64_MAX


def test_update_keeps_large_amounts(locker):
    owner = key()
    locker.machines.upsert_machine(Machine(owner=owner, uuid=uid(3), price=1))
    assert locker.machines.update_machine(Machine(owner=owner, uuid=uid(3), price=2**63 + 5))
    assert locker.machines.get_machine(owner, uid(3)).price == 2**63 + 5


def test_counts_and_prune(locker):
    owner = key()
    for n in range(3):
        locker.machines.upsert_machine(Machine(owner=owner, uuid=uid(n)))
    assert locker.machines.prune_machines([(owner, uid(0))]) == 2
    assert locker.counts()["machines"] == 1
