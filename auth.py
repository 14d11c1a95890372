from dataclasses import dataclass
from typing import Optional

from schemas import Role

ROLES = ("farmer", "collector", "facility", "laboratory", "manufacturer")

# Owner ids used by demo data when the session has no actor id.
DEMO_ACTOR_IDS = {
    "farmer": "farmer-1",
    "collector": "collector-1",
    "facility": "facility-1",
    "laboratory": "lab-1",
    "manufacturer": "manufacturer-1",
}


@dataclass(frozen=True)
class AuthContext:
    """Current session as supplied by the auth provider. Read only."""

    role: Role
    actor_id: Optional[str] = None
    display_name: str = ""

    def owner_id(self) -> str:
        return self.actor_id or DEMO_ACTOR_IDS[self.role]


def parse_auth(role: Optional[str], actor_id: Optional[str], display_name: Optional[str]) -> Optional[AuthContext]:
    """Build a session from loose inputs; unknown or missing role means no session."""
    if not role or role not in ROLES:
        return None
    return AuthContext(role=role, actor_id=actor_id or None, display_name=display_name or "")
