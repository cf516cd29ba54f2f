from __future__ import annotations

from realty_chat.application.dto.principal import Principal
from realty_chat.application.exceptions import ForbiddenError


def assert_acts_as(principal: Principal, user_id: int) -> None:
    """Raise unless principal is user_id itself or an admin."""
    if not principal.can_act_as(user_id):
        raise ForbiddenError("Not allowed to act on behalf of this user")


def assert_conversation_party(principal: Principal, user_a: int, user_b: int) -> None:
    # Admins have global access
    if principal.is_admin:
        return
    if principal.user_id not in (user_a, user_b):
        raise ForbiddenError("Not a party of this conversation")
