from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from pointsledger.models import PeriodStatus, UserRole
from pointsledger.services import period_service
from pointsledger.services.errors import LedgerRuleViolation, NoActivePeriod


def test_no_active_period(db_session, factory):
    factory.period("2026 Spring")

    assert period_service.get_active_period(db_session) is None
    with pytest.raises(NoActivePeriod) as excinfo:
        period_service.require_active_period(db_session)
    assert excinfo.value.status_code == 409


def test_active_period_lookup(db_session, factory):
    active = factory.period("2025 Fall", status=PeriodStatus.ACTIVE)
    factory.period("2026 Spring")

    assert period_service.get_active_period(db_session).id == active.id
    assert period_service.require_active_period(db_session).id == active.id
    assert period_service.get_period_by_id(db_session, active.id).name == "2025 Fall"
    assert period_service.get_period_by_id(db_session, "missing") is None


def test_create_period_derives_week_count(db_session):
    period = period_service.create_period(
        db_session, name="2025 Fall", start_date=date(2025, 9, 15), end_date=date(2026, 1, 16)
    )

    assert period.status == PeriodStatus.PLANNED
    assert period.total_weeks == 18


def test_create_period_rejects_duplicates_and_bad_dates(db_session):
    period_service.create_period(db_session, name="2025 Fall", start_date=date(2025, 9, 15))

    with pytest.raises(LedgerRuleViolation, match="already exists"):
        period_service.create_period(db_session, name="2025 Fall", start_date=date(2025, 9, 15))
    with pytest.raises(LedgerRuleViolation, match="End date"):
        period_service.create_period(
            db_session, name="Backwards", start_date=date(2025, 9, 15), end_date=date(2025, 9, 1)
        )


def test_activation_completes_previous_period(db_session, factory, people):
    previous = factory.period("2025 Spring", status=PeriodStatus.ACTIVE)
    upcoming = factory.period("2025 Fall")
    student = people["student"]
    student.points = 80
    student.experience = 120
    db_session.flush()

    activated = period_service.activate_period(db_session, upcoming.id)
    db_session.refresh(student)

    assert activated.status == PeriodStatus.ACTIVE
    assert previous.status == PeriodStatus.COMPLETED
    assert period_service.get_active_period(db_session).id == upcoming.id
    assert student.points == 0 and student.experience == 0


def test_activation_can_keep_counters(db_session, factory, people):
    upcoming = factory.period("2025 Fall")
    admin = people["admin"]
    student = people["student"]
    student.points = 80
    admin.points = 5
    db_session.flush()

    period_service.activate_period(db_session, upcoming.id, reset_counters=False)
    db_session.refresh(student)

    assert student.points == 80
    assert admin.role == UserRole.ADMIN and admin.points == 5


def test_activation_rules(db_session, factory):
    active = factory.period("2025 Fall", status=PeriodStatus.ACTIVE)
    done = factory.period("2024 Fall", status=PeriodStatus.COMPLETED)

    with pytest.raises(LedgerRuleViolation, match="already active"):
        period_service.activate_period(db_session, active.id)
    with pytest.raises(LedgerRuleViolation, match="reactivated"):
        period_service.activate_period(db_session, done.id)
    with pytest.raises(LedgerRuleViolation) as excinfo:
        period_service.activate_period(db_session, "missing")
    assert excinfo.value.status_code == 404


def test_single_active_period_enforced_by_index(db_session, factory):
    factory.period("2025 Fall", status=PeriodStatus.ACTIVE)

    with pytest.raises(IntegrityError):
        factory.period("2025 Fall bis", status=PeriodStatus.ACTIVE)


def test_update_period(db_session, factory):
    period = factory.period("2025 Fall")

    updated = period_service.update_period(db_session, period.id, name="Fall 2025", description="Main term")

    assert updated.name == "Fall 2025"
    assert updated.description == "Main term"


def test_completed_period_is_frozen(db_session, factory):
    period = factory.period("2024 Fall", status=PeriodStatus.COMPLETED)

    with pytest.raises(LedgerRuleViolation, match="cannot be modified"):
        period_service.update_period(db_session, period.id, name="Renamed")


def test_delete_only_unused_periods(db_session, factory, people):
    unused = factory.period("Unused")
    used = factory.period("Used", status=PeriodStatus.ACTIVE)
    factory.points(people["student"], people["tutor"], used, 10)

    period_service.delete_period(db_session, unused.id)

    assert period_service.get_period_by_id(db_session, unused.id) is None
    with pytest.raises(LedgerRuleViolation, match="cannot be deleted"):
        period_service.delete_period(db_session, used.id)


def test_current_week(factory):
    period = factory.period("2025 Fall", start=date(2025, 9, 15), total_weeks=4)

    assert period_service.current_week(period, date(2025, 9, 14)) == 0
    assert period_service.current_week(period, date(2025, 9, 15)) == 1
    assert period_service.current_week(period, date(2025, 9, 22)) == 2
    assert period_service.current_week(period, date(2025, 12, 1)) == 4


def test_complete_expired_periods(db_session, factory):
    expired = factory.period(
        "2025 Spring", status=PeriodStatus.ACTIVE, start=date(2025, 2, 1), end=date(2025, 6, 1)
    )
    open_ended = factory.period("Open", start=date(2025, 2, 1))

    completed = period_service.complete_expired_periods(db_session, today=date(2025, 6, 2))

    assert completed == 1
    assert expired.status == PeriodStatus.COMPLETED
    assert open_ended.status == PeriodStatus.PLANNED
    assert period_service.complete_expired_periods(db_session, today=date(2025, 6, 3)) == 0
