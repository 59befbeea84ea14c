# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

Kept apart from ``middleware/auth.py`` so services and tests can build
scopes without pulling in Starlette.
"""

from scholarship_db.enums import UserRole

from ..schemas.auth import DataScope


def build_data_scope(role: UserRole, user_id: str) -> DataScope:
    """Build data scope rules based on the user's role."""
    if role == UserRole.STUDENT:
        return DataScope(own_data_only=True, user_id=user_id)
    if role in (UserRole.ADMIN, UserRole.REVIEWER):
        return DataScope(full_pipeline=True)
    # sponsor or unknown -- no application visibility
    return DataScope()
