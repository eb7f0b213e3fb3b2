from distri_mirror.chain.bootstrap import BootstrapScanner
from distri_mirror.core.errors import TransportError
from distri_mirror.models.mirror import Machine, Order, Reward, RewardMachine
from distri_mirror.services.mirror_service import MirrorService
from fakes import key, uid

OWNER, BUYER = key(), key()


def _machine(n, **kw):
    return Machine(owner=OWNER, uuid=uid(n), order_pda=key(), **kw)


def _order(n):
    return Order(order_id=uid(100 + n), buyer=BUYER, seller=OWNER, machine_id=uid(n))


def test_bootstrap_mirrors_snapshot(locker, chain):
    chain.put(_machine(1, price=4))
    chain.put(_machine(2))
    chain.put(_order(1))
    chain.put(Reward(period=1, pool=500))
    chain.put(RewardMachine(period=1, owner=OWNER, machine_id=uid(1), task_num=2))

    assert BootstrapScanner(chain, MirrorService(locker, chain)).bootstrap() is True
    assert locker.counts() == {"machines": 2, "orders": 1, "rewards": 1, "reward_machines": 1}
    assert locker.machines.get_machine(OWNER, uid(1)).price == 4


def test_bootstrap_prunes_rows_gone_from_chain(locker, chain):
    svc = MirrorService(locker, chain)
    chain.put(_machine(1))
    chain.put(_machine(2))
    chain.put(_order(1))
    BootstrapScanner(chain, svc).bootstrap()

    chain.drop(_machine(2))
    chain.drop(_order(1))
    assert BootstrapScanner(chain, svc).bootstrap() is True

    assert [m.uuid for m in locker.machines.list_machines()] == [uid(1)]
    assert locker.orders.list_orders() == []


def test_fetch_failure_leaves_mirror_untouched(locker, chain):
    svc = MirrorService(locker, chain)
    chain.put(_machine(1))
    BootstrapScanner(chain, svc).bootstrap()

    chain.fetch_error = TransportError("503 from rpc")
    assert BootstrapScanner(chain, svc).bootstrap() is False
    assert locker.counts()["machines"] == 1


def test_unknown_accounts_are_ignored(locker, chain):
    chain.accounts["Config111"] = b"\xff" * 80
    chain.put(_machine(1))

    assert BootstrapScanner(chain, MirrorService(locker, chain)).bootstrap() is True
    assert locker.counts()["machines"] == 1


def test_failing_pass_does_not_stop_the_rest(locker, chain):
    class BrokenOrders(MirrorService):
        def reconcile_orders(self, orders):
            raise RuntimeError("orders table locked")

    chain.put(_machine(1))
    chain.put(_order(1))
    chain.put(Reward(period=2))

    assert BootstrapScanner(chain, BrokenOrders(locker, chain)).bootstrap() is False
    assert locker.counts()["machines"] == 1
    assert locker.counts()["rewards"] == 1
    assert locker.counts()["orders"] == 0
