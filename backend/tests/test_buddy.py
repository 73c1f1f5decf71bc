import random

import pytest

from textilehome.models.product import Product
from textilehome.services.buddy_service import (
    FOLLOW_UPS,
    PAGE_MESSAGES,
    BuddyNotFound,
    BuddyService,
)


def test_page_message(client):
    res = client.get("/api/buddy/message", params={"page": "bedsheets"})
    assert res.status_code == 200
    body = res.json()
    assert body["id"] == "bedsheet-expert"
    assert [a["kind"] for a in body["actions"]] == ["message", "recommend"]
    assert body["actions"][1]["target"] == "pillow-covers"
    assert body["actions"][1]["variant"] == "outline"


def test_unknown_page_falls_back_to_home(client):
    body = client.get("/api/buddy/message", params={"page": "checkout"}).json()
    assert body["id"] in {m["id"] for m in PAGE_MESSAGES["home"]}


def test_cart_count_takes_priority(client):
    body = client.get("/api/buddy/message", params={"page": "home", "cartCount": 3}).json()
    assert body["id"] == "cart-celebration"
    assert body["mood"] == "winking"
    assert "3 items in your cart" in body["text"]

    body = client.get("/api/buddy/message", params={"cartCount": 1}).json()
    assert "1 item in your cart" in body["text"]


def test_negative_cart_count_is_rejected(client):
    assert client.get("/api/buddy/message", params={"cartCount": -1}).status_code == 400


def test_follow_up_messages(client):
    body = client.get("/api/buddy/messages/quiz").json()
    assert body["mood"] == "thinking"
    assert [(a["kind"], a["target"]) for a in body["actions"]] == [
        ("quiz-answer", "hot"),
        ("quiz-answer", "cool"),
        ("quiz-answer", "balanced"),
    ]
    assert client.get("/api/buddy/messages/nope").status_code == 404


def test_every_message_target_resolves():
    for messages in PAGE_MESSAGES.values():
        for msg in messages:
            for action in msg["actions"]:
                if action["kind"] == "message":
                    assert action["target"] in FOLLOW_UPS


def test_recommendation(client):
    res = client.get("/api/buddy/recommendation/hot")
    assert res.status_code == 200
    body = res.json()
    assert body["sleepType"] == "hot"
    assert body["category"] == "bedsheets"
    assert body["message"]["mood"] == "excited"
    products = body["products"]
    assert len(products) == 4
    assert {p["category"] for p in products} == {"bedsheets"}
    assert [p["name"] for p in products[:2]] == ["Premium Cotton Sheets", "Bamboo Silk Sheets"]


def test_unknown_sleep_type(client):
    assert client.get("/api/buddy/recommendation/sideways").status_code == 404


def test_message_choice_uses_rng():
    svc = BuddyService(rng=random.Random(7))
    seen = {svc.message_for("home")["id"] for _ in range(50)}
    assert seen == {"welcome", "comfort-guide"}


def test_recommendation_skips_out_of_stock(db):
    db.query(Product).filter(Product.name == "Premium Cotton Sheets").update({"in_stock": False})
    db.commit()
    rec = BuddyService(db).recommendation("cool", limit=8)
    names = [p.name for p in rec["products"]]
    assert "Premium Cotton Sheets" not in names
    assert names[0] == "Bamboo Silk Sheets"
    assert len(names) == 7

    with pytest.raises(BuddyNotFound):
        BuddyService(db).follow_up("missing")
