"""Decision and delivery services for DM Redirect."""

from .dispatcher import ReplyDispatcher
from .eligibility import EligibilityDecider
from .history import HistoryProber
from .responder import AutoResponder
from .suppression import SuppressionStore

__all__ = [
    "AutoResponder",
    "EligibilityDecider",
    "HistoryProber",
    "ReplyDispatcher",
    "SuppressionStore",
]
