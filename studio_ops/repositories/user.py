"""Staff lookups used by the calendar filters and notification CCs."""
from collections.abc import Iterable

from sqlmodel import Session, select

from studio_ops.core.constants import USER_ROLE_NAMES, UserRoleId
from studio_ops.models import User


class UserRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_users_by_roles_and_states(
        self, role_ids: Iterable[int], state_ids: Iterable[int | None]
    ) -> list[User]:
        """Active users holding one of ``role_ids`` and based in one of ``state_ids``."""
        state_ids = [s for s in state_ids if s is not None]
        statement = (
            select(User)
            .where(User.is_active == True)  # noqa: E712
            .where(User.role_id.in_(list(role_ids)))
            .where(User.state_id.in_(state_ids))
            .order_by(User.id)
        )
        return list(self.session.exec(statement).all())

    def get_grouped_users_for_calendar_filter(self) -> dict[str, list[User]]:
        """Active staff grouped under their role's display name.

        Groups follow role order; users without a known role go under "Other".
        """
        statement = (
            select(User)
            .where(User.is_active == True)  # noqa: E712
            .order_by(User.first_name, User.last_name)
        )
        grouped: dict[str, list[User]] = {name: [] for name in USER_ROLE_NAMES.values()}
        for user in self.session.exec(statement).all():
            label = USER_ROLE_NAMES.get(user.role_id, "Other")
            grouped.setdefault(label, []).append(user)
        return {label: users for label, users in grouped.items() if users}

    def get_account_managers_list(self) -> dict[int, str]:
        statement = (
            select(User)
            .where(User.is_active == True)  # noqa: E712
            .where(User.role_id == UserRoleId.ACCOUNT_MANAGER)
            .order_by(User.first_name, User.last_name)
        )
        return {user.id: user.full_name for user in self.session.exec(statement).all()}
