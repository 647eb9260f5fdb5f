"""Tests for input validation and schedule checks."""

from datetime import date

import pytest

from roadmap.engine.generator import RiskFlag, RiskSeverity, ScheduleResult
from roadmap.validator import summarize_risks, validate_inputs, validate_schedule
from factories import make_block, make_edge, make_engineer, make_initiative


def test_valid_inputs_pass():
    validate_inputs(
        [make_initiative("a"), make_initiative("b")],
        [make_engineer("ana"), make_engineer("off", working_days="", is_active=False)],
        [make_edge("b", "a")],
    )


@pytest.mark.parametrize(
    "engineer, message",
    [
        (make_engineer("ana", working_days=""), "no working days"),
        (make_engineer("ana", working_days="0,7"), "invalid working days"),
        (make_engineer("ana", weekly_capacity=0), "non-positive"),
        (make_engineer("ana", unavailability=[(date(2025, 3, 7), date(2025, 3, 3))]), "unavailability"),
    ],
)
def test_bad_engineers_are_rejected(engineer, message):
    with pytest.raises(ValueError, match=message):
        validate_inputs([], [engineer], [])


def test_bad_initiatives_are_rejected():
    with pytest.raises(ValueError, match="negative effort"):
        validate_inputs([make_initiative("a", effort=-1)], [], [])

    inverted = make_initiative("a", lock_dates=True, locked_start=date(2025, 3, 7), locked_end=date(2025, 3, 3))
    with pytest.raises(ValueError, match="locked end"):
        validate_inputs([inverted], [], [])


def test_self_dependency_is_rejected():
    with pytest.raises(ValueError, match="depends on itself"):
        validate_inputs([make_initiative("a")], [], [make_edge("a", "a")])


def _result(*blocks, unscheduled=()):
    return ScheduleResult(blocks=list(blocks), risks=[], unscheduled=list(unscheduled))


def test_schedule_checks_catch_bad_blocks():
    done = make_initiative("done", status="DONE")
    a = make_initiative("a")
    block = make_block(None, "a", "ana", date(2025, 3, 3), date(2025, 3, 7))

    with pytest.raises(ValueError, match="Multiple blocks"):
        validate_schedule(_result(block, block), [a], [])
    with pytest.raises(ValueError, match="both scheduled and unscheduled"):
        validate_schedule(_result(block, unscheduled=["a"]), [a], [])
    with pytest.raises(ValueError, match="unknown initiative"):
        validate_schedule(_result(block), [], [])
    with pytest.raises(ValueError, match="unschedulable"):
        validate_schedule(_result(make_block(None, "done", "ana", date(2025, 3, 3), date(2025, 3, 7))), [done], [])
    with pytest.raises(ValueError, match="ends before"):
        validate_schedule(_result(make_block(None, "a", "ana", date(2025, 3, 7), date(2025, 3, 3))), [a], [])


def test_moved_locked_block_is_caught():
    locked = make_initiative("a", lock_dates=True, locked_start=date(2025, 3, 3), locked_end=date(2025, 3, 7))
    moved = make_block(None, "a", "ana", date(2025, 3, 10), date(2025, 3, 14))

    with pytest.raises(ValueError, match="was moved"):
        validate_schedule(_result(moved), [locked], [])


def test_dependency_order_is_checked_outside_cycles():
    a, b = make_initiative("a"), make_initiative("b")
    parent = make_block(None, "a", "ana", date(2025, 3, 3), date(2025, 3, 7))
    child = make_block(None, "b", "ana", date(2025, 3, 7), date(2025, 3, 11))

    with pytest.raises(ValueError, match="before dependency"):
        validate_schedule(_result(parent, child), [a, b], [make_edge("b", "a")])

    # members of a cycle are exempt
    validate_schedule(_result(parent, child), [a, b], [make_edge("b", "a"), make_edge("a", "b")])


def test_summarize_risks_lists_critical_first():
    result = ScheduleResult(
        risks=[
            RiskFlag("a", "Deadline buffer exceeded", RiskSeverity.WARNING),
            RiskFlag("b", "Cannot find available slot for scheduling", RiskSeverity.CRITICAL),
        ]
    )
    assert summarize_risks(result) == [
        "[CRITICAL] b: Cannot find available slot for scheduling",
        "[WARNING] a: Deadline buffer exceeded",
    ]


def test_every_member_of_an_overlapping_cycle_is_exempt():
    """Edges a->b, b->a, a->c, c->b form one cycle containing c."""
    initiatives = [make_initiative("a"), make_initiative("b"), make_initiative("c")]
    edges = [make_edge("a", "b"), make_edge("b", "a"), make_edge("a", "c"), make_edge("c", "b")]
    result = _result(
        make_block(None, "c", "ana", date(2025, 3, 3), date(2025, 3, 7)),
        make_block(None, "a", "ana", date(2025, 3, 10), date(2025, 3, 14)),
        make_block(None, "b", "ana", date(2025, 3, 17), date(2025, 3, 21)),
    )

    validate_schedule(result, initiatives, edges)
