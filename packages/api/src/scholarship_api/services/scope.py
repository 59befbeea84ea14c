# This project was developed with assistance from AI tools.
"""Shared data scope filtering for application queries."""

from scholarship_db import Application
from sqlalchemy import false

from ..schemas.auth import DataScope


def apply_data_scope(stmt, scope: DataScope):
    """Restrict an Application query to what the caller may see.

    Students only ever see their own applications and admins and reviewers
    see all.  A scope granting neither (sponsors) matches nothing.
    """
    if scope.own_data_only and scope.user_id:
        stmt = stmt.where(Application.user_id == scope.user_id)
    elif not scope.full_pipeline:
        stmt = stmt.where(false())
    return stmt
