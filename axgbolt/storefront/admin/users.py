"""Admin user management panel."""

from dataclasses import dataclass
from typing import Any

from axgbolt.storefront.admin.base import AdminPanel, ConfirmCallback, ListQuery

# Password the server gives accounts created without one
DEFAULT_PASSWORD_NOTICE = "Default password: TempPass123!"


@dataclass
class UserForm:
    """Create/edit form of a user account."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    role: str = "user"
    phone: str = ""
    is_active: bool = True
    password: str = ""

    @classmethod
    def from_user(cls, user: dict[str, Any]) -> "UserForm":
        return cls(
            first_name=user.get("first_name") or "",
            last_name=user.get("last_name") or "",
            email=user.get("email") or "",
            role=user.get("role") or "user",
            phone=user.get("phone") or "",
            is_active=user.get("is_active", True),
        )

    def validate(self) -> str | None:
        if not self.first_name.strip() or not self.last_name.strip():
            return "First and last name are required"
        if not self.email.strip():
            return "Email is required"
        return None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "first_name": self.first_name.strip(),
            "last_name": self.last_name.strip(),
            "email": self.email.strip(),
            "role": self.role,
            "phone": self.phone.strip() or None,
            "is_active": self.is_active,
        }
        if self.password:
            payload["password"] = self.password
        return payload

    def changes_since(self, original: "UserForm") -> dict[str, Any]:
        current = self.to_payload()
        before = original.to_payload()
        current.pop("password", None)
        return {key: value for key, value in current.items() if before.get(key) != value}


class UserPanel(AdminPanel):
    """List, create, edit and delete user accounts.

    Filters: ``role`` and ``is_active``.
    """

    items_key = "users"
    default_sort = "created_at"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.message: str | None = None

    def _fetch(self, query: ListQuery) -> Any:
        return self.api.list_users(
            page=query.page,
            limit=query.page_size,
            search=query.search.strip() or None,
            role=query.filters.get("role"),
            is_active=query.filters.get("is_active"),
            sort_by=query.sort_by,
            sort_order=query.sort_order,
        )

    async def create(self, form: UserForm) -> bool:
        self.message = None
        error = form.validate()
        if error is not None:
            self.error = error
            return False

        response = await self._mutate(
            self.api.create_user(form.to_payload()), "Failed to create user"
        )
        if not response.success:
            return False

        self.message = "User created successfully."
        if not form.password:
            self.message = f"{self.message} {DEFAULT_PASSWORD_NOTICE}"
        await self.refresh()
        return True

    async def update(self, user: dict[str, Any], form: UserForm) -> bool:
        """Send the fields that changed relative to ``user``."""
        self.message = None
        error = form.validate()
        if error is not None:
            self.error = error
            return False

        changes = form.changes_since(UserForm.from_user(user))
        if changes:
            response = await self._mutate(
                self.api.update_user(user["id"], changes), "Failed to update user"
            )
            if not response.success:
                return False

        self.message = "User updated successfully"
        await self.refresh()
        return True

    async def delete(self, user_id: str, confirm: ConfirmCallback) -> bool:
        """Delete an account. Its reviews stay, without an author."""
        self.message = None
        deleted = await self._delete(
            lambda: self.api.delete_user(user_id),
            confirm,
            "Are you sure you want to delete this user? This action cannot be undone.",
            "Failed to delete user",
        )
        if deleted:
            self.message = "User deleted successfully"
        return deleted
