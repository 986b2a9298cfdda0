"""
Actor Guards

The acting user and role are passed explicitly into every mutating service call.
Provides:
- Actor value + role enum
- Privilege guards (raise AuthorizationError before any write)
- FastAPI dependency resolving the actor from request headers
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fastapi import Header, HTTPException

from teamops.services.errors import AuthorizationError


class ActorRole(str, Enum):
    admin = "admin"
    coach = "coach"
    player = "player"


PRIVILEGED_ROLES = frozenset({ActorRole.admin, ActorRole.coach})


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: ActorRole

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES


def require_authenticated(actor: Optional[Actor], action: str) -> Actor:
    """Require any signed-in actor, otherwise raise AuthorizationError"""
    if actor is None or not actor.user_id:
        raise AuthorizationError(f"Must be signed in to {action}")
    return actor


def require_privileged(actor: Optional[Actor], action: str) -> Actor:
    """
    Require an admin or coach.

    Raises:
        AuthorizationError: actor missing or not privileged
    """
    actor = require_authenticated(actor, action)
    if not actor.is_privileged:
        raise AuthorizationError(f"Role '{actor.role.value}' is not allowed to {action}")
    return actor


def get_actor(
    x_actor_id: Optional[str] = Header(default=None),
    x_actor_role: Optional[str] = Header(default=None),
) -> Actor:
    """Resolve the caller from X-Actor-Id / X-Actor-Role (set by the auth proxy)"""
    if not x_actor_id:
        raise HTTPException(status_code=401, detail="NOT_AUTHENTICATED: X-Actor-Id header is required")
    try:
        role = ActorRole((x_actor_role or ActorRole.player.value).lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"INVALID_ACTOR_ROLE: Unknown role '{x_actor_role}'")
    return Actor(user_id=x_actor_id, role=role)
