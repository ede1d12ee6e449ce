from dataclasses import dataclass

from food_storefront.exceptions import Forbidden
from food_storefront.models import RoleEnum, User


@dataclass(frozen=True)
class Actor:
    """
    Аутентифицированный вызывающий.
    Передаётся в crud явно; не зависит от состояния сессии ORM.
    """
    id: int
    role: RoleEnum

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, role=RoleEnum(user.role))


def require_role(actor: Actor, *roles: RoleEnum) -> None:
    """Проверяет роль вызывающего, иначе Forbidden."""
    if actor.role not in roles:
        allowed = ", ".join(r.value for r in roles)
        raise Forbidden(f"Operation requires role: {allowed}")


def is_admin(actor: Actor) -> bool:
    return actor.role == RoleEnum.admin
