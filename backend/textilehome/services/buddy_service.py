"""
Bedtime Buddy: the storefront mascot.

The widget asks for a message for the page the shopper is on, follows the
message ids its action buttons point at, and asks for a sleep-style
recommendation at the end of the quiz.
"""
import random
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from textilehome.repositories.product_repo import ProductRepository


class BuddyNotFound(Exception):
    pass


def _recommend(label, category, variant="default"):
    return {"label": label, "kind": "recommend", "target": category, "variant": variant}


def _follow(label, message_id, variant="default"):
    return {"label": label, "kind": "message", "target": message_id, "variant": variant}


def _answer(label, sleep_type):
    return {"label": label, "kind": "quiz-answer", "target": sleep_type, "variant": "default"}


def _dismiss(label, variant="outline"):
    return {"label": label, "kind": "dismiss", "target": None, "variant": variant}


PAGE_MESSAGES: Dict[str, List[dict]] = {
    "home": [
        {
            "id": "welcome",
            "text": "Hi there! I'm your Bedtime Buddy! \U0001F319 Ready to create the perfect sleep sanctuary?",
            "mood": "happy",
            "actions": [
                _recommend("Show me bedsheets", "bedsheets"),
                _dismiss("I'm just browsing"),
            ],
        },
        {
            "id": "comfort-guide",
            "text": "Sweet dreams start with the right bedding! Let me help you find something cozy.",
            "mood": "happy",
            "actions": [_follow("Find my perfect match", "quiz")],
        },
    ],
    "bedsheets": [
        {
            "id": "bedsheet-expert",
            "text": "Great choice! Cotton sheets are breathable and perfect for year-round comfort. Need help choosing?",
            "mood": "happy",
            "actions": [
                _follow("What's the difference?", "bedsheet-guide"),
                _recommend("Show pillow covers too", "pillow-covers", "outline"),
            ],
        },
    ],
    "pillow-covers": [
        {
            "id": "pillow-expert",
            "text": "Pillow covers that match your sheets create a harmonious bedroom! Want to complete the set?",
            "mood": "happy",
            "actions": [
                _recommend("Yes, show table covers", "table-covers"),
                _dismiss("Just pillows for now"),
            ],
        },
    ],
    "table-covers": [
        {
            "id": "table-expert",
            "text": "Table covers protect your furniture and add style to your bedroom. Perfect for a complete look!",
            "mood": "happy",
            "actions": [_follow("Show me complete sets", "complete-set")],
        },
    ],
    "product": [
        {
            "id": "product-help",
            "text": "This looks lovely! Want to know why this would be perfect for your bedroom?",
            "mood": "happy",
            "actions": [
                _follow("Tell me more", "product-tips"),
                _follow("Add to cart", "add-to-cart", "outline"),
            ],
        },
    ],
}

FOLLOW_UPS: Dict[str, dict] = {
    "quiz": {
        "id": "quiz",
        "text": "What's your sleep style? Hot sleeper? Cool sleeper? Or somewhere in between?",
        "mood": "thinking",
        "actions": [
            _answer("I sleep hot", "hot"),
            _answer("I sleep cool", "cool"),
            _answer("Just right", "balanced"),
        ],
    },
    "bedsheet-guide": {
        "id": "bedsheet-guide",
        "text": "Cotton is breathable and gets softer with each wash. Thread count matters, but quality cotton at 200-400 TC is perfect for comfort!",
        "mood": "happy",
        "actions": [_dismiss("Thanks! Show me options", "default")],
    },
    "complete-set": {
        "id": "complete-set",
        "text": "A complete bedroom set creates the perfect sleep environment! Mix and match or go for a coordinated look.",
        "mood": "happy",
        "actions": [
            _recommend("I love coordinated sets", "bedsheets"),
            _dismiss("I prefer to mix & match"),
        ],
    },
    "product-tips": {
        "id": "product-tips",
        "text": "This premium cotton feels amazing and gets softer with every wash. The color will stay vibrant too!",
        "mood": "happy",
        "actions": [_dismiss("Sounds perfect!", "default")],
    },
    "add-to-cart": {
        "id": "add-to-cart",
        "text": "Great choice! Don't forget to check out our matching pillow covers for the complete look!",
        "mood": "happy",
        "actions": [_recommend("Show pillow covers", "pillow-covers")],
    },
}

SLEEP_RECOMMENDATIONS = {
    "hot": "Perfect! Our breathable cotton sheets will keep you cool all night. Let me show you!",
    "cool": "Great! Our cozy flannel-feel sheets will keep you warm and comfortable.",
    "balanced": "Excellent! Our premium cotton blend is perfect for year-round comfort.",
}
RECOMMENDED_CATEGORY = "bedsheets"


class BuddyService:
    def __init__(self, db: Optional[Session] = None, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng or random.Random()

    def message_for(self, page: Optional[str], cart_count: int = 0) -> dict:
        if cart_count > 0:
            plural = "s" if cart_count > 1 else ""
            return {
                "id": "cart-celebration",
                "text": f"Wonderful! You have {cart_count} item{plural} in your cart. Ready for sweet dreams? \U0001F634",
                "mood": "winking",
                "actions": [
                    _recommend("Add more items", "bedsheets", "outline"),
                    _dismiss("Perfect as is!", "default"),
                ],
            }
        options = PAGE_MESSAGES.get(page or "home", PAGE_MESSAGES["home"])
        return self.rng.choice(options)

    def follow_up(self, message_id: str) -> dict:
        msg = FOLLOW_UPS.get(message_id)
        if not msg:
            raise BuddyNotFound(f"Unknown buddy message {message_id!r}")
        return msg

    def recommendation(self, sleep_type: str, limit: int = 4) -> dict:
        text = SLEEP_RECOMMENDATIONS.get(sleep_type)
        if not text:
            raise BuddyNotFound(f"Unknown sleep type {sleep_type!r}")
        products = ProductRepository(self.db).recommend(RECOMMENDED_CATEGORY, limit=limit)
        return {
            "sleep_type": sleep_type,
            "message": {
                "id": "recommendation",
                "text": text,
                "mood": "excited",
                "actions": [_recommend("Show me these sheets", RECOMMENDED_CATEGORY)],
            },
            "category": RECOMMENDED_CATEGORY,
            "products": products,
        }
