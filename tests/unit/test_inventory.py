"""Unit tests for post-confirmation stock decrement."""

import asyncio

import pytest
from services.store_service.services.inventory import (
    decrement_order_stock,
    decrement_variant_stock,
)
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tests.factories import (
    OrderFactory,
    OrderItemFactory,
    seed_product,
    variant_stock,
)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_order_stock_is_decremented_per_line(db_session):
    tee = await seed_product(db_session, stock=5, sizes=("M", "L"))
    order = OrderFactory.create(
        items=[
            OrderItemFactory.create(product_id=tee.id, size="M", quantity=2, position=0),
            OrderItemFactory.create(product_id=tee.id, size="L", quantity=1, position=1),
        ]
    )
    db_session.add(order)
    await db_session.commit()

    result = await decrement_order_stock(db_session, order)

    assert result.succeeded
    assert [d.applied for d in result.decrements] == [True, True]
    assert await variant_stock(db_session, tee.id, "M") == 3
    assert await variant_stock(db_session, tee.id, "L") == 4


@pytest.mark.asyncio
@pytest.mark.unit
async def test_insufficient_stock_never_goes_negative(db_session):
    tee = await seed_product(db_session, stock=1)
    order = OrderFactory.create(
        items=[OrderItemFactory.create(product_id=tee.id, size="M", quantity=2)]
    )
    db_session.add(order)
    await db_session.commit()

    result = await decrement_order_stock(db_session, order)

    assert not result.succeeded
    assert result.failures[0].error == "insufficient stock"
    assert "insufficient stock" in result.summary()
    assert await variant_stock(db_session, tee.id) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_one_failed_line_does_not_block_the_others(db_session):
    tee = await seed_product(db_session, stock=1, sizes=("M", "L"))
    order = OrderFactory.create(
        items=[
            OrderItemFactory.create(product_id=tee.id, size="M", quantity=3, position=0),
            OrderItemFactory.create(product_id=tee.id, size="L", quantity=1, position=1),
        ]
    )
    db_session.add(order)
    await db_session.commit()

    result = await decrement_order_stock(db_session, order)

    assert [d.applied for d in result.decrements] == [False, True]
    assert await variant_stock(db_session, tee.id, "L") == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_variant_is_reported(db_session):
    tee = await seed_product(db_session, stock=5)
    order = OrderFactory.create(
        items=[OrderItemFactory.create(product_id=tee.id, size="XXL", quantity=1)]
    )

    result = await decrement_order_stock(db_session, order)

    assert not result.succeeded


@pytest.mark.asyncio
@pytest.mark.unit
async def test_concurrent_decrements_for_last_unit(file_engine):
    """Two buyers racing for the last unit: exactly one wins."""
    session_factory = async_sessionmaker(
        bind=file_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        tee = await seed_product(session, stock=1)

    async def take_one():
        async with session_factory() as session:
            applied = await decrement_variant_stock(session, tee.id, "M", 1)
            await session.commit()
            return applied

    outcomes = await asyncio.gather(take_one(), take_one())

    assert sorted(outcomes) == [False, True]
    async with session_factory() as session:
        assert await variant_stock(session, tee.id) == 0
