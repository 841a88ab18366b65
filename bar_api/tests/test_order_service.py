from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from bar_api.app.domain import OrderSource, OrderStatus
from bar_api.app.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    SessionClosedError,
    UpstreamUnavailableError,
    ValidationError,
)
from bar_api.app.models_bar import Order, OrderItem
from bar_api.app.repos_sqlalchemy import CatalogRepoSQL, OrdersRepoSQL, SessionsRepoSQL
from bar_api.app.services import OrderService, replace_catalog
from bar_api.app.table_auth import sign_table_code

from catalog_samples import sample_catalog

SECRET = "qr-secret"


class Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 3, 1, 21, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def _service(db, orders=None, **kwargs) -> OrderService:
    kwargs.setdefault("signing_secret", SECRET)
    kwargs.setdefault("clock", Clock())
    return OrderService(
        orders or OrdersRepoSQL(db), CatalogRepoSQL(db), SessionsRepoSQL(db), **kwargs
    )


async def _count(db, model) -> int:
    return await db.scalar(select(func.count()).select_from(model))


@pytest.mark.anyio
async def test_repeated_drinks_are_merged_and_priced(seeded):
    async with seeded() as db:
        order = await _service(db).create_order(
            {
                "items": [
                    {"drink_id": "mojito", "qty": 2},
                    {"drink_id": "daiquiri", "qty": 1},
                    {"drink_id": "mojito", "qty": 1},
                ],
                "customer_name": "  Ana ",
            }
        )
        stored = await OrdersRepoSQL(db).get(order.id)
    assert [(l.drink_id, l.qty, l.unit_price) for l in stored.lines] == [
        ("mojito", 3, 42.9),
        ("daiquiri", 1, 50.9),
    ]
    assert stored.subtotal == 179.6
    assert stored.total_items == 4
    assert stored.customer_name == "Ana"
    assert stored.status is OrderStatus.PENDING
    assert stored.source is OrderSource.COUNTER
    assert stored.table_code is None
    assert stored.code.startswith("DRK-20260301-")


@pytest.mark.anyio
async def test_subtotal_matches_sum_of_lines(seeded):
    async with seeded() as db:
        order = await _service(db).create_order(
            {
                "items": [
                    {"drink_id": "house-shot", "qty": 3},
                    {"drink_id": "mojito", "qty": 1, "note": "no ice"},
                    {"drink_id": "mojito", "qty": 1},
                    {"drink_id": "water", "qty": 2},
                ]
            }
        )
    assert order.subtotal == round(sum(l.line_total for l in order.lines), 2)
    for line in order.lines:
        assert line.line_total == round(line.unit_price * line.qty, 2)
    assert len(order.lines) == 4


@pytest.mark.anyio
async def test_zero_total_order_rejected(seeded):
    async with seeded() as db:
        with pytest.raises(ValidationError, match="greater than zero"):
            await _service(db).create_order({"items": [{"drink_id": "water", "qty": 2}]})
        assert await _count(db, Order) == 0


@pytest.mark.anyio
@pytest.mark.parametrize("drink_id", ["staff-special", "unknown"])
async def test_drink_must_be_on_public_menu(seeded, drink_id):
    async with seeded() as db:
        with pytest.raises(ValidationError) as info:
            await _service(db).create_order({"items": [{"drink_id": drink_id, "qty": 1}]})
    assert info.value.details == {"drink_id": drink_id}


@pytest.mark.anyio
async def test_missing_catalog_is_upstream_error(sessionmaker):
    async with sessionmaker() as db:
        with pytest.raises(UpstreamUnavailableError):
            await _service(db).create_order({"items": [{"drink_id": "mojito", "qty": 1}]})


@pytest.mark.anyio
async def test_locked_prices_survive_catalog_change(seeded):
    async with seeded() as db:
        service = _service(db)
        order = await service.create_order({"items": [{"drink_id": "mojito", "qty": 1}]})
        catalog = sample_catalog()
        catalog["settings"]["markup"] = 5
        await replace_catalog(CatalogRepoSQL(db), catalog)
        stored = await service.get(order.id)
    assert stored.lines[0].unit_price == 42.9
    assert stored.subtotal == 42.9


@pytest.mark.anyio
async def test_verified_table_order_needs_open_session(seeded):
    payload = {
        "items": [{"drink_id": "mojito", "qty": 1}],
        "table_code": "m01",
        "table_token": sign_table_code("M01", SECRET),
    }
    async with seeded() as db:
        service = _service(db)
        with pytest.raises(SessionClosedError):
            await service.create_order(payload)
        assert await _count(db, Order) == 0

        opened = await SessionsRepoSQL(db).insert("BAR-1", datetime.now(timezone.utc))
        order = await service.create_order(payload)
    assert order.source is OrderSource.VERIFIED_TABLE
    assert order.table_code == "M01"
    assert order.session_id == opened.id


@pytest.mark.anyio
async def test_session_gate_can_be_disabled(seeded):
    payload = {
        "items": [{"drink_id": "mojito", "qty": 1}],
        "table_code": "M01",
        "table_token": sign_table_code("M01", SECRET),
    }
    async with seeded() as db:
        order = await _service(db, require_session_for_table_orders=False).create_order(
            payload
        )
    assert order.source is OrderSource.VERIFIED_TABLE
    assert order.session_id is None


@pytest.mark.anyio
async def test_bad_table_token_becomes_counter_order(seeded):
    async with seeded() as db:
        order = await _service(db).create_order(
            {
                "items": [{"drink_id": "mojito", "qty": 1}],
                "table_code": "M01",
                "table_token": "0" * 64,
            }
        )
    assert order.source is OrderSource.COUNTER
    assert order.table_code is None
    assert order.to_dict()["table_code"] is None


class FailingLinesRepo(OrdersRepoSQL):
    async def insert_lines(self, order_id, lines):
        raise RuntimeError("disk full")


@pytest.mark.anyio
async def test_failed_lines_remove_the_header(seeded):
    async with seeded() as db:
        service = _service(db, orders=FailingLinesRepo(db))
        with pytest.raises(RuntimeError):
            await service.create_order({"items": [{"drink_id": "mojito", "qty": 1}]})
        assert await _count(db, Order) == 0
        assert await _count(db, OrderItem) == 0


@pytest.mark.anyio
async def test_code_collision_retries_with_new_code(seeded):
    codes = iter(["DRK-A", "DRK-A", "DRK-B"])
    async with seeded() as db:
        service = _service(db, code_factory=lambda prefix, now: next(codes))
        first = await service.create_order({"items": [{"drink_id": "mojito", "qty": 1}]})
        second = await service.create_order({"items": [{"drink_id": "mojito", "qty": 1}]})
    assert (first.code, second.code) == ("DRK-A", "DRK-B")


@pytest.mark.anyio
async def test_code_allocation_gives_up(seeded):
    async with seeded() as db:
        service = _service(db, attempts=2, code_factory=lambda prefix, now: "DRK-SAME")
        await service.create_order({"items": [{"drink_id": "mojito", "qty": 1}]})
        with pytest.raises(ConflictError, match="could not allocate"):
            await service.create_order({"items": [{"drink_id": "mojito", "qty": 1}]})
        assert await _count(db, Order) == 1


@pytest.mark.anyio
async def test_status_lifecycle(seeded):
    async with seeded() as db:
        service = _service(db)
        order = await service.create_order({"items": [{"drink_id": "mojito", "qty": 1}]})
        with pytest.raises(InvalidTransitionError):
            await service.update_status(order.id, "completed")
        working = await service.update_status(order.id, "in_progress")
        assert working.status is OrderStatus.IN_PROGRESS
        assert working.updated_at > order.updated_at
        back = await service.update_status(order.id, "pending")
        assert back.status is OrderStatus.PENDING
        await service.update_status(order.id, "in_progress")
        done = await service.update_status(order.id, "completed")
        assert done.status is OrderStatus.COMPLETED
        with pytest.raises(InvalidTransitionError) as info:
            await service.update_status(order.id, "pending")
        assert info.value.details == {"from": "completed", "to": "pending"}


class StaleReadOrders(OrdersRepoSQL):
    """Serves one outdated read, as a second operator's screen would."""

    def __init__(self, session, snapshot) -> None:
        super().__init__(session)
        self.snapshot = snapshot

    async def get(self, order_id):
        if self.snapshot is not None:
            snapshot, self.snapshot = self.snapshot, None
            return snapshot
        return await super().get(order_id)


@pytest.mark.anyio
async def test_concurrent_status_change_cannot_reopen_completed_order(seeded):
    async with seeded() as db:
        first = _service(db)
        order = await first.create_order({"items": [{"drink_id": "mojito", "qty": 1}]})
        seen = await first.update_status(order.id, "in_progress")
        second = _service(db, orders=StaleReadOrders(db, seen))

        done = await first.update_status(order.id, "completed")
        assert done.status is OrderStatus.COMPLETED
        with pytest.raises(InvalidTransitionError) as info:
            await second.update_status(order.id, "pending")
        assert info.value.details == {"from": "completed", "to": "pending"}
        stored = await first.get(order.id)
    assert stored.status is OrderStatus.COMPLETED
    assert stored.updated_at == done.updated_at


@pytest.mark.anyio
async def test_status_change_on_deleted_order_is_not_found(seeded):
    async with seeded() as db:
        service = _service(db)
        order = await service.create_order({"items": [{"drink_id": "mojito", "qty": 1}]})
        stale = _service(db, orders=StaleReadOrders(db, order))
        await OrdersRepoSQL(db).delete_order(order.id)
        with pytest.raises(NotFoundError):
            await stale.update_status(order.id, "in_progress")


@pytest.mark.anyio
async def test_unknown_status_leaves_order_untouched(seeded):
    async with seeded() as db:
        service = _service(db)
        order = await service.create_order({"items": [{"drink_id": "mojito", "qty": 1}]})
        with pytest.raises(ValidationError) as info:
            await service.update_status(order.id, "delivered")
        assert "in_progress" in info.value.details["allowed"]
        stored = await service.get(order.id)
    assert stored.status is OrderStatus.PENDING
    assert stored.updated_at == order.updated_at


@pytest.mark.anyio
async def test_unknown_order_id(seeded):
    async with seeded() as db:
        service = _service(db)
        with pytest.raises(NotFoundError):
            await service.get("missing")
        with pytest.raises(NotFoundError):
            await service.update_status("missing", "in_progress")
        with pytest.raises(NotFoundError):
            await service.session_orders("missing")


@pytest.mark.anyio
async def test_list_orders_watermark(seeded):
    async with seeded() as db:
        service = _service(db)
        assert (await service.list_orders()).orders == []
        first = await service.create_order({"items": [{"drink_id": "mojito", "qty": 1}]})
        second = await service.create_order({"items": [{"drink_id": "daiquiri", "qty": 1}]})

        page = await service.list_orders()
        assert [o.code for o in page.orders] == [second.code, first.code]
        assert page.updated_at == second.updated_at

        assert await service.list_orders(since=page.updated_at.isoformat()) is None
        older = (page.updated_at - timedelta(seconds=1)).isoformat()
        assert await service.list_orders(since=older) is not None
        assert await service.list_orders(since="not-a-date") is not None

        await service.update_status(first.id, "in_progress")
        working = await service.list_orders(status="in_progress")
        assert [o.id for o in working.orders] == [first.id]
        assert await service.list_orders(since=page.updated_at.isoformat()) is not None


@pytest.mark.anyio
async def test_session_orders(seeded):
    async with seeded() as db:
        opened = await SessionsRepoSQL(db).insert("BAR-1", datetime.now(timezone.utc))
        service = _service(db)
        order = await service.create_order({"items": [{"drink_id": "mojito", "qty": 2}]})
        listed = await service.session_orders(opened.id)
        history = await SessionsRepoSQL(db).list_recent()
    assert [o.id for o in listed] == [order.id]
    assert history[0].orders_count == 1
    assert history[0].subtotal == 85.8
