"""Per-request identity context.

Every request resolves to exactly one of two values: ``Authenticated`` when
the ``authorization`` header carries a valid token, ``Anonymous`` otherwise.
The value is computed once and passed explicitly into each service call;
services alone decide whether an anonymous caller is acceptable.
"""
import logging
from dataclasses import dataclass
from typing import Union

from .errors import Forbidden, InvalidToken, Unauthorized
from .models import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authenticated:
    user_id: int
    role: Role


@dataclass(frozen=True)
class Anonymous:
    pass


Identity = Union[Authenticated, Anonymous]


def resolve_identity(authorization: str | None, tokens) -> Identity:
    """Turn the raw ``authorization`` header value into an identity.

    The header is handed to ``tokens.verify`` as-is (no ``Bearer`` prefix
    handling). Verification failures are not surfaced to the caller.
    """
    try:
        return tokens.verify(authorization or "")
    except InvalidToken as e:
        logger.debug("request treated as anonymous: %s", e)
        return Anonymous()


def require_identity(context: Identity) -> Authenticated:
    if not isinstance(context, Authenticated):
        raise Unauthorized()
    return context


def require_role(context: Identity, role: Role) -> Authenticated:
    # Anonymous callers have no role, so they are forbidden as well
    if not isinstance(context, Authenticated) or context.role != role:
        raise Forbidden()
    return context
