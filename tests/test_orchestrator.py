"""Tests for orchestrator workflows against an in-memory database."""

from datetime import date

import pytest

from roadmap.config import DEFAULT_CONFIG
from roadmap.domain.models import AuditLog, Initiative, ScheduledBlock
from roadmap.domain.repositories import AuditLogRepository, EngineerRepository, ScheduledBlockRepository
from roadmap.engine.orchestrator import (
    PlacementError,
    move_block,
    place_block,
    recommend_for_initiative,
    regenerate_schedule,
)
from factories import make_block, make_edge, make_engineer, make_initiative, make_specialty

pytestmark = pytest.mark.integration


@pytest.fixture
def roster(db_session):
    """Two engineers, one Backend specialist."""
    backend = make_specialty("Backend")
    engineers = [
        make_engineer("ana", primary=[backend]),
        make_engineer("bob", unavailability=[(date(2025, 1, 6), date(2025, 1, 10))]),
    ]
    db_session.add_all(engineers)
    db_session.commit()
    return backend


def _blocks(session, initiative_id):
    return session.query(ScheduledBlock).filter(ScheduledBlock.initiative_id == initiative_id).all()


def test_get_active_drops_past_unavailability(db_session, roster, monday):
    engineers = EngineerRepository.get_active(db_session, monday)

    assert [e.id for e in engineers] == ["ana", "bob"]
    assert engineers[1].unavailability == []


def test_regenerate_persists_blocks_and_audit(db_session, roster, monday):
    db_session.add_all([make_initiative("i1", tags=[roster], priority=2), make_initiative("i2", priority=1)])
    db_session.commit()

    result = regenerate_schedule(db_session, DEFAULT_CONFIG, now=monday, user_id="u1")

    assert len(result.blocks) == 2
    stored = ScheduledBlockRepository.get_all(db_session)
    assert [(b.initiative_id, b.engineer_id) for b in stored] == [("i1", "ana"), ("i2", "ana")]
    assert stored[1].start_date == date(2025, 3, 10)

    audit = AuditLogRepository.get_all(db_session)
    assert len(audit) == 1
    assert (audit[0].action, audit[0].entity_type, audit[0].entity_id) == ("SCHEDULE", "Schedule", "full-regeneration")
    assert audit[0].details["blocksCreated"] == 2
    assert audit[0].user_id == "u1"


def test_regenerate_replaces_unlocked_and_keeps_locked_blocks(db_session, roster, monday):
    locked = make_initiative(
        "locked",
        lock_dates=True,
        locked_start=date(2025, 3, 10),
        locked_end=date(2025, 3, 14),
        assigned_engineer_id="bob",
        lock_assignment=True,
    )
    db_session.add_all([
        locked,
        make_initiative("i1"),
        make_block("keep", "locked", "bob", date(2025, 3, 10), date(2025, 3, 14)),
        make_block("stale", "i1", "ana", date(2025, 3, 24), date(2025, 3, 28)),
    ])
    db_session.commit()

    regenerate_schedule(db_session, DEFAULT_CONFIG, now=monday)
    db_session.expire_all()

    assert [b.id for b in _blocks(db_session, "locked")] == ["keep"]
    assert db_session.query(ScheduledBlock).filter_by(id="stale").count() == 0
    assert len(_blocks(db_session, "i1")) == 1


def test_regenerate_twice_does_not_duplicate(db_session, roster, monday):
    db_session.add(make_initiative("i1"))
    db_session.commit()

    regenerate_schedule(db_session, DEFAULT_CONFIG, now=monday)
    regenerate_schedule(db_session, DEFAULT_CONFIG, now=monday)

    assert len(ScheduledBlockRepository.get_all(db_session)) == 1


def test_dry_run_writes_nothing(db_session, roster, monday):
    db_session.add(make_initiative("i1"))
    db_session.commit()

    result = regenerate_schedule(db_session, DEFAULT_CONFIG, now=monday, persist=False)

    assert len(result.blocks) == 1
    assert ScheduledBlockRepository.get_all(db_session) == []
    assert db_session.query(AuditLog).count() == 0


def test_regenerate_rejects_malformed_input(db_session, monday):
    db_session.add(make_engineer("ana", weekly_capacity=0))
    db_session.add(make_initiative("i1"))
    db_session.commit()

    with pytest.raises(ValueError, match="non-positive weekly capacity"):
        regenerate_schedule(db_session, DEFAULT_CONFIG, now=monday)


def test_regenerate_reports_cycles(db_session, roster, monday, capsys):
    db_session.add_all([make_initiative("a"), make_initiative("b"), make_edge("a", "b"), make_edge("b", "a")])
    db_session.commit()

    regenerate_schedule(db_session, DEFAULT_CONFIG, now=monday, persist=False)

    assert "[WARN] Dependency cycle among: a, b" in capsys.readouterr().out


def test_recommend_for_initiative(db_session, roster, monday):
    db_session.add(make_initiative("i1", tags=[roster]))
    db_session.commit()

    recommendations = recommend_for_initiative(db_session, "i1", DEFAULT_CONFIG, now=monday)

    assert [r.engineer_id for r in recommendations] == ["ana", "bob"]
    assert recommendations[0].score == 77

    with pytest.raises(LookupError):
        recommend_for_initiative(db_session, "missing", DEFAULT_CONFIG, now=monday)


def test_place_block_assigns_engineer(db_session, roster):
    db_session.add(make_initiative("i1", effort=2))
    db_session.commit()

    block = place_block(db_session, "i1", date(2025, 3, 3), engineer_id="bob", user_id="u1")

    assert (block.start_date, block.end_date) == (date(2025, 3, 3), date(2025, 3, 14))
    assert block.hours_allocated == 80
    assert db_session.get(Initiative, "i1").assigned_engineer_id == "bob"
    audit = db_session.query(AuditLog).one()
    assert (audit.action, audit.entity_type, audit.entity_id) == ("SCHEDULE", "ScheduledBlock", block.id)


def test_place_block_errors(db_session, roster):
    db_session.add(make_initiative("i1"))
    db_session.commit()

    with pytest.raises(LookupError):
        place_block(db_session, "missing", date(2025, 3, 3), engineer_id="ana")
    with pytest.raises(LookupError):
        place_block(db_session, "i1", date(2025, 3, 3), engineer_id="ghost")
    with pytest.raises(PlacementError):
        place_block(db_session, "i1", date(2025, 3, 3))


def _seed_week_blocks(session):
    session.add_all([
        make_initiative("ix", assigned_engineer_id="ana"),
        make_initiative("iy", assigned_engineer_id="ana"),
        make_initiative("iz", assigned_engineer_id="ana"),
        make_block("x", "ix", "ana", date(2025, 3, 3), date(2025, 3, 7)),
        make_block("y", "iy", "ana", date(2025, 3, 10), date(2025, 3, 14)),
        make_block("z", "iz", "ana", date(2025, 3, 17), date(2025, 3, 21)),
    ])
    session.commit()


def test_move_block_bumps_and_audits(db_session, roster):
    _seed_week_blocks(db_session)

    plan = move_block(db_session, "x", date(2025, 3, 10), date(2025, 3, 14), user_id="u1")
    db_session.expire_all()

    assert len(plan.bumped) == 2
    assert db_session.get(ScheduledBlock, "y").start_date == date(2025, 3, 17)
    assert db_session.get(ScheduledBlock, "z").start_date == date(2025, 3, 24)
    audit = db_session.query(AuditLog).one()
    assert audit.action == "MOVE"
    assert [b["id"] for b in audit.details["bumpedBlocks"]] == ["y", "z"]


def test_move_block_reassigns(db_session, roster):
    _seed_week_blocks(db_session)

    plan = move_block(db_session, "x", date(2025, 3, 3), date(2025, 3, 7), new_engineer_id="bob")
    db_session.expire_all()

    assert plan.engineer_changed is True
    assert db_session.get(ScheduledBlock, "x").engineer_id == "bob"
    assert db_session.get(Initiative, "ix").assigned_engineer_id == "bob"
    audit = db_session.query(AuditLog).one()
    assert audit.action == "MOVE_AND_REASSIGN"
    assert audit.details["previousEngineerId"] == "ana"


def test_move_locked_block_is_refused(db_session, roster):
    db_session.add_all([
        make_initiative("il", lock_dates=True, locked_start=date(2025, 3, 3), locked_end=date(2025, 3, 7)),
        make_block("l", "il", "ana", date(2025, 3, 3), date(2025, 3, 7)),
    ])
    db_session.commit()

    with pytest.raises(PlacementError):
        move_block(db_session, "l", date(2025, 3, 10), date(2025, 3, 14))
    with pytest.raises(LookupError):
        move_block(db_session, "missing", date(2025, 3, 10), date(2025, 3, 14))


def test_bulk_create_blocks(db_session, roster):
    db_session.add(make_initiative("i1"))
    db_session.commit()
    block = make_block("b1", "i1", "ana", date(2025, 3, 3), date(2025, 3, 7))

    ScheduledBlockRepository.bulk_create(db_session, [block], commit=False)
    db_session.rollback()
    assert ScheduledBlockRepository.get_all(db_session) == []

    ScheduledBlockRepository.bulk_create(db_session, [make_block("b2", "i1", "ana", date(2025, 3, 3), date(2025, 3, 7))])
    db_session.rollback()
    assert [b.id for b in ScheduledBlockRepository.get_all(db_session)] == ["b2"]


def test_regenerate_tolerates_overlapping_cycle(db_session, roster, monday, capsys):
    db_session.add_all([
        make_initiative("b", deadline=date(2025, 6, 2)),
        make_initiative("a", deadline=date(2025, 6, 3)),
        make_initiative("c", deadline=date(2025, 6, 4)),
        make_edge("a", "b"),
        make_edge("b", "a"),
        make_edge("a", "c"),
        make_edge("c", "b"),
    ])
    db_session.commit()

    result = regenerate_schedule(db_session, DEFAULT_CONFIG, now=monday)

    assert result.unscheduled == []
    assert len(ScheduledBlockRepository.get_all(db_session)) == 3
    assert "[WARN] Dependency cycle among: a, b, c" in capsys.readouterr().out
