"""Role capabilities and actor checks for core operations."""

from partsledger.core.entities.order import Order
from partsledger.core.entities.user import AuthenticatedUser, Role
from partsledger.core.exceptions import ForbiddenError, UnauthenticatedError

APPROVER_ROLES = frozenset({Role.ADMIN, Role.MANAGER})


def can_approve_orders(role: Role | str) -> bool:
    return Role.parse(role) in APPROVER_ROLES


def can_create_orders(role: Role | str) -> bool:
    # Every authenticated user may raise orders
    return True


def require_user(user: AuthenticatedUser | None, action: str) -> AuthenticatedUser:
    """Return the caller or raise UnauthenticatedError."""
    if user is None or not user.id:
        raise UnauthenticatedError(action)
    return user


def ensure_requester(order: Order, user: AuthenticatedUser, action: str) -> None:
    """Only the user who raised the order may edit, submit or delete it."""
    if order.requested_by != user.id:
        raise ForbiddenError(action, "only the requester may do this")


def ensure_approver(user: AuthenticatedUser, action: str) -> None:
    if not can_approve_orders(user.role):
        raise ForbiddenError(action, f"role '{user.role.value}' cannot approve orders")
