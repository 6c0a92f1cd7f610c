import pytest
from sqlalchemy import select

from artmarket.core.config import settings
from artmarket.db.models import Artwork, Notification, Order
from artmarket.services.orders import first_image_url, handle_order_created
from tests.helpers.factories import make_artwork, make_user

INDEX = settings.search_artworks_index


def _purchase_records(db, user_id):
    stmt = select(Notification).where(Notification.user_id == user_id, Notification.type == "Purchase")
    return list(db.execute(stmt).scalars().all())


@pytest.mark.asyncio
async def test_order_marks_artworks_sold_and_notifies_each_seller(db, ctx, search, push):
    make_user(db, "buyer", "Bea Buyer")
    make_user(db, "seller-1", "Sam", push_token="tok-s1")
    make_user(db, "seller-2", "Sue")
    make_artwork(db, "art-1", user_id="seller-1")
    make_artwork(db, "art-2", user_id="seller-1", title="Red Dune", images=[{"url": "https://img.test/dune.jpg"}])
    make_artwork(db, "art-3", user_id="seller-2")

    result = await handle_order_created(
        db, ctx, "buyer", "order-1", {"artworks": ["art-1", "art-2", "art-3", "gone"], "total": 900}, event_id="evt-o1"
    )

    assert result.processed is True
    for artwork_id in ("art-1", "art-2", "art-3"):
        assert db.get(Artwork, artwork_id).status == "Sold"
        assert search.get(INDEX, artwork_id)["status"] == "Sold"

    seller_1 = _purchase_records(db, "seller-1")
    assert len(seller_1) == 2
    assert {r.image for r in seller_1} == {"https://img.test/art-1.jpg", "https://img.test/dune.jpg"}
    assert all(r.sender_name == "Bea Buyer" and r.status == "PAID" and r.reference_id == "order-1" for r in seller_1)
    assert len(_purchase_records(db, "seller-2")) == 1
    assert len(push.sent_to("tok-s1")) == 2
    assert push.sent_to("tok-s1")[0]["data"] == {"routeName": "/orders"}

    order = db.get(Order, "order-1")
    assert order.user_id == "buyer"
    assert order.total == 900.0


@pytest.mark.asyncio
async def test_redelivered_order_does_not_duplicate_records(db, ctx):
    make_user(db, "buyer", "Bea Buyer")
    make_user(db, "seller-1", "Sam")
    make_artwork(db, "art-1", user_id="seller-1")
    snapshot = {"artworks": ["art-1"], "status": "COMPLETED"}

    await handle_order_created(db, ctx, "buyer", "order-1", snapshot, event_id="evt-o1")
    await handle_order_created(db, ctx, "buyer", "order-1", snapshot, event_id="evt-o1")

    records = _purchase_records(db, "seller-1")
    assert len(records) == 1
    assert records[0].status == "COMPLETED"
    assert db.query(Order).count() == 1


@pytest.mark.asyncio
async def test_buyer_is_not_notified_of_own_artwork(db, ctx):
    make_user(db, "buyer", "Bea Buyer")
    make_artwork(db, "art-1", user_id="buyer")

    await handle_order_created(db, ctx, "buyer", "order-1", {"artworks": ["art-1"]})

    assert db.get(Artwork, "art-1").status == "Sold"
    assert _purchase_records(db, "buyer") == []


@pytest.mark.asyncio
async def test_buyer_name_falls_back_to_order_snapshot(db, ctx):
    make_user(db, "seller-1", "Sam")
    make_artwork(db, "art-1", user_id="seller-1")

    await handle_order_created(db, ctx, "guest", "order-1", {"artworks": ["art-1"], "buyerName": "Guest Gil"})

    assert _purchase_records(db, "seller-1")[0].sender_name == "Guest Gil"


@pytest.mark.asyncio
async def test_order_without_artworks_is_skipped(db, ctx):
    result = await handle_order_created(db, ctx, "buyer", "order-1", {"artworks": []})

    assert result.processed is False
    assert db.get(Order, "order-1") is None


def test_first_image_url():
    assert first_image_url(None) is None
    assert first_image_url(["", {"url": "https://img.test/x.jpg"}]) == "https://img.test/x.jpg"
    assert first_image_url(["https://img.test/a.jpg", "https://img.test/b.jpg"]) == "https://img.test/a.jpg"
