"""Authentication — identities, the login flow, and access decisions.

``guildhall.auth.gate`` and ``guildhall.auth.flow`` depend on the
session layer, which in turn stores ``Identity``; import them from
their modules.
"""

from guildhall.auth.identity import Identity, PartialGuild
from guildhall.auth.provider import DiscordOAuth, IdentityProvider

__all__ = ["DiscordOAuth", "Identity", "IdentityProvider", "PartialGuild"]
