from typing import List, Literal, Optional

from textilehome.schemas.product_schema import CamelModel, ProductOut


class BuddyAction(CamelModel):
    label: str
    kind: Literal["recommend", "message", "quiz-answer", "dismiss"]
    target: Optional[str] = None
    variant: Literal["default", "outline"] = "default"


class BuddyMessage(CamelModel):
    id: str
    text: str
    mood: Literal["happy", "excited", "sleepy", "thinking", "winking"] = "happy"
    actions: List[BuddyAction] = []


class BuddyRecommendation(CamelModel):
    sleep_type: str
    message: BuddyMessage
    category: str
    products: List[ProductOut]
