from identity.context import Identity, IdentityContext
from identity.resolver import IdentityResolver

__all__ = ["Identity", "IdentityContext", "IdentityResolver"]
