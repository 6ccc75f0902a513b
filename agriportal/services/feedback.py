"""Feedback manager with rating analytics over the loaded page."""

from __future__ import annotations

from typing import Optional

from agriportal.models.enums import FeedbackType
from agriportal.models.records import Feedback
from agriportal.models.service_models import RatingSummary
from agriportal.services.list_manager import ListManager

POSITIVE_RATING_THRESHOLD = 4


def _fold(value: Optional[str]) -> Optional[str]:
    return value.lower() if value else None


class FeedbackManager(ListManager[Feedback]):
    """``ListManager`` for ``feedbacks``."""

    def calculate_ratings(
        self,
        feedback_type: FeedbackType,
        product: Optional[str] = None,
    ) -> RatingSummary:
        """Count positive (rating >= 4) and negative ratings in ``items``.

        For ``PRODUCT`` feedback only entries for *product* are counted;
        the comparison ignores case.
        """
        if feedback_type == FeedbackType.GENERAL:
            matching = [f for f in self.items if f.feedback_type == FeedbackType.GENERAL]
        else:
            wanted = _fold(product)
            matching = [
                f
                for f in self.items
                if f.feedback_type == FeedbackType.PRODUCT and _fold(f.product) == wanted
            ]

        positive = sum(1 for f in matching if f.rating >= POSITIVE_RATING_THRESHOLD)
        return RatingSummary(
            positive=positive,
            negative=len(matching) - positive,
            total=len(matching),
        )
