from sync.manager import SubscriptionManager
from sync.subscription import LiveQuery, SubscriptionState

__all__ = ["LiveQuery", "SubscriptionManager", "SubscriptionState"]
