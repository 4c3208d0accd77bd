"""Concurrent writers against one store."""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from fleetledger.domain.catalog import CatalogService
from fleetledger.domain.entities import CatalogKind
from fleetledger.domain.errors import DomainError
from fleetledger.domain.recharge import RechargeCardService

WORKERS = 4
TOP_UPS_PER_WORKER = 5


def _with_retry(func, attempts=200):
    for _ in range(attempts - 1):
        try:
            return func()
        except DomainError as e:
            if not e.retryable:
                raise
    return func()


def test_parallel_top_ups_are_all_counted(temp_db, sample_card):
    service = RechargeCardService(temp_db)

    def worker():
        try:
            for _ in range(TOP_UPS_PER_WORKER):
                _with_retry(lambda: service.top_up(sample_card.id, 1))
        finally:
            temp_db.disconnect()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        for future in [pool.submit(worker) for _ in range(WORKERS)]:
            future.result()

    expected = Decimal(WORKERS * TOP_UPS_PER_WORKER)
    balance = service.get_balance(sample_card.id)
    assert balance.balance == expected
    assert balance.total_movements == WORKERS * TOP_UPS_PER_WORKER
    assert service.replay_balance(sample_card.id) == expected
    sequences = [m.sequence for m in service.movements(sample_card.id, limit=None)]
    assert sorted(sequences) == list(range(1, WORKERS * TOP_UPS_PER_WORKER + 1))


def test_parallel_find_or_create_returns_one_entry(temp_db):
    service = CatalogService(temp_db)

    def worker(name):
        try:
            return _with_retry(lambda: service.find_or_create(CatalogKind.BRAND, name)).id
        finally:
            temp_db.disconnect()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        ids = list(pool.map(worker, ["Toyota", "TOYOTA", "toyota", " Toyota "]))

    assert len(set(ids)) == 1
    assert len(service.list_all(CatalogKind.BRAND)) == 1
