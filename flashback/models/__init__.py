"""
Models package - imports all models so they register with SQLModel.
"""
# Import enums first
from flashback.models.enums import ReviewSessionStatus

# Import all models
from flashback.models.card import Card
from flashback.models.review_session_item import ReviewSessionItem
from flashback.models.item import Item
from flashback.models.review_session import ReviewSession
from flashback.models.review import Review

__all__ = [
    'ReviewSessionStatus',
    'Card',
    'ReviewSessionItem',
    'Item',
    'ReviewSession',
    'Review',
]
