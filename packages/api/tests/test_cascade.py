# This project was developed with assistance from AI tools.
"""Tests for cascade deletion of cycles and applications."""

import pytest
from scholarship_db import (
    Application,
    ApplicationDocument,
    ApplicationHistory,
    ApplicationReview,
    Criterion,
    Cycle,
    Program,
)
from scholarship_db.enums import ApplicationStatus
from sqlalchemy import func, select

from personas import admin, reviewer, student_alice, student_bruno
from scholarship_api.services import application as app_service
from scholarship_api.services import cascade
from scholarship_api.services import cycle as cycle_service
from scholarship_api.services.errors import NotFoundError


async def _count(session, model, **where):
    stmt = select(func.count()).select_from(model)
    for column, value in where.items():
        stmt = stmt.where(getattr(model, column) == value)
    return await session.scalar(stmt)


async def _populate(session, cycle):
    """Two applications with documents, one reviewed."""
    first = await app_service.create_application(
        session, student_alice(), cycle_id=cycle.id, document_ids=["transcript", "id-card"]
    )
    second = await app_service.create_application(
        session, student_bruno(), cycle_id=cycle.id, document_ids=["transcript"]
    )
    await app_service.submit_application(session, student_bruno(), second.id)
    await app_service.review_application(
        session, reviewer(), second.id, decision=ApplicationStatus.APPROVED, score=91
    )
    return first, second


async def test_delete_cycle_removes_whole_subtree(db_session, make_cycle):
    cycle = await make_cycle(eligibility_criteria=["A", "B"])
    program_id = cycle.program_id
    await _populate(db_session, cycle)

    removed = await cycle_service.delete_cycle(db_session, cycle.id)

    assert removed["criteria"] == 2
    assert removed["applications"] == 2
    assert removed["documents"] == 3
    assert removed["reviews"] == 1
    # CREATED x2, SUBMITTED, REVIEWED
    assert removed["history"] == 4

    for model in (Cycle, Criterion, Application, ApplicationDocument, ApplicationReview,
                  ApplicationHistory):
        assert await _count(db_session, model) == 0
    # Programs are never removed by a cycle delete
    assert await _count(db_session, Program, id=program_id) == 1


async def test_delete_cycle_leaves_sibling_cycles_alone(db_session, make_cycle):
    doomed = await make_cycle(academic_year="2025-2026", eligibility_criteria=["A"])
    kept = await make_cycle(academic_year="2026-2027", eligibility_criteria=["B"])
    await app_service.create_application(
        db_session, admin(), cycle_id=kept.id, applicant_id="keeper"
    )

    await cycle_service.delete_cycle(db_session, doomed.id)

    assert await _count(db_session, Cycle) == 1
    assert await _count(db_session, Criterion, cycle_id=kept.id) == 1
    assert await _count(db_session, Application, cycle_id=kept.id) == 1


async def test_delete_cycle_without_dependents(db_session, open_cycle):
    removed = await cycle_service.delete_cycle(db_session, open_cycle.id)
    assert removed == {
        "criteria": 0,
        "applications": 0,
    }


async def test_delete_unknown_cycle(db_session):
    with pytest.raises(NotFoundError):
        await cycle_service.delete_cycle(db_session, 999)


async def test_delete_application_removes_dependents_only(db_session, open_cycle):
    first, second = await _populate(db_session, open_cycle)

    removed = await app_service.delete_application(db_session, admin(), second.id)

    assert removed == {"documents": 1, "reviews": 1, "history": 3}
    assert await _count(db_session, Application) == 1
    assert await _count(db_session, ApplicationDocument, application_id=first.id) == 2
    assert await _count(db_session, ApplicationReview) == 0
    assert await _count(db_session, ApplicationHistory, application_id=second.id) == 0


async def test_delete_unknown_application(db_session):
    with pytest.raises(NotFoundError):
        await cascade.delete_application_tree(db_session, 31337)
