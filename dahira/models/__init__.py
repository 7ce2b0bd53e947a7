"""Model exports used by metadata discovery."""

from dahira.models.auth_identity import AuthIdentity
from dahira.models.member import Member
from dahira.models.profile import Profile

__all__ = ["AuthIdentity", "Member", "Profile"]
