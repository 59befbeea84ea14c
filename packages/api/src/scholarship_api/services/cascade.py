# This project was developed with assistance from AI tools.
"""Cascade deletion of a cycle or an application together with its dependents.

The ownership graph lives on the models as ``cascade="all, delete-orphan"``
relationships.  Here the whole subtree is loaded eagerly and the root is
deleted once; the unit of work then issues child deletes before parent
deletes inside the caller's transaction.  Nothing is committed here.
"""

import logging

from scholarship_db import Application, Cycle
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .errors import NotFoundError

logger = logging.getLogger(__name__)

_APPLICATION_CHILDREN = ("documents", "reviews", "history")


def _application_tree(via_cycle: bool = False):
    """Eager-load options for every application dependent."""
    options = []
    for name in _APPLICATION_CHILDREN:
        attr = getattr(Application, name)
        if via_cycle:
            options.append(selectinload(Cycle.applications).selectinload(attr))
        else:
            options.append(selectinload(attr))
    return options


def _count_application_children(application: Application, removed: dict[str, int]) -> None:
    for name in _APPLICATION_CHILDREN:
        removed[name] = removed.get(name, 0) + len(getattr(application, name))


async def delete_cycle_tree(session: AsyncSession, cycle_id: int) -> dict[str, int]:
    """Delete a cycle, its criteria, and its applications with their dependents.

    Returns counts of removed dependents by kind.  Raises NotFoundError if the
    cycle does not exist; missing dependents are simply counted as zero.
    """
    stmt = (
        select(Cycle)
        .options(
            selectinload(Cycle.criteria),
            *_application_tree(via_cycle=True),
        )
        .where(Cycle.id == cycle_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    cycle = (await session.execute(stmt)).scalar_one_or_none()
    if cycle is None:
        raise NotFoundError("Cycle", cycle_id)

    removed = {"criteria": len(cycle.criteria), "applications": len(cycle.applications)}
    for application in cycle.applications:
        _count_application_children(application, removed)

    await session.delete(cycle)
    await session.flush()
    logger.debug("Cycle %s subtree flushed for deletion: %s", cycle_id, removed)
    return removed


async def delete_application_tree(session: AsyncSession, application_id: int) -> dict[str, int]:
    """Delete one application with its documents, reviews and history."""
    stmt = (
        select(Application)
        .options(*_application_tree())
        .where(Application.id == application_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    application = (await session.execute(stmt)).scalar_one_or_none()
    if application is None:
        raise NotFoundError("Application", application_id)

    removed: dict[str, int] = {}
    _count_application_children(application, removed)

    await session.delete(application)
    await session.flush()
    logger.debug("Application %s subtree flushed for deletion: %s", application_id, removed)
    return removed
