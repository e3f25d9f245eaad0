import pytest

from pointsledger.models import LedgerKind, PeriodStatus, TransactionType, UserRole
from pointsledger.services import balance_service, rollback_service, transaction_service
from pointsledger.services.balance_service import Aggregation
from pointsledger.services.errors import LedgerRuleViolation, NoActivePeriod


@pytest.fixture
def period(factory):
    return factory.period("2025 Fall", status=PeriodStatus.ACTIVE)


def test_award_requires_active_period(db_session, people):
    with pytest.raises(NoActivePeriod):
        transaction_service.award_points(
            db_session, actor_id="tutor", student_id="student", points=10
        )


def test_award_appends_to_active_period(db_session, people, period):
    transaction = transaction_service.award_points(
        db_session, actor_id="tutor", student_id="student", points=30, reason="workshop"
    )

    assert transaction.type == TransactionType.AWARD
    assert transaction.period_id == period.id
    assert transaction.tutor_id == "tutor"
    assert transaction.rolled_back is False
    assert people["student"].points == 30
    assert people["student"].experience == 30
    assert balance_service.calculate_user_points(db_session, "student") == 30
    assert balance_service.calculate_user_experience(db_session, "student") == 30


def test_award_permissions(db_session, factory, people, period):
    factory.user("athlete", role=UserRole.ATHLETE)

    with pytest.raises(LedgerRuleViolation) as excinfo:
        transaction_service.award_points(db_session, actor_id="other-tutor", student_id="student", points=5)
    assert excinfo.value.status_code == 403

    with pytest.raises(LedgerRuleViolation) as excinfo:
        transaction_service.award_points(db_session, actor_id="student", student_id="student", points=5)
    assert excinfo.value.status_code == 403

    with pytest.raises(LedgerRuleViolation) as excinfo:
        transaction_service.award_points(db_session, actor_id="admin", student_id="athlete", points=5)
    assert excinfo.value.status_code == 404

    admin_award = transaction_service.award_points(db_session, actor_id="admin", student_id="student", points=5)
    assert admin_award.tutor_id == "admin"


def test_award_rejects_non_positive_points(db_session, people, period):
    with pytest.raises(LedgerRuleViolation, match="greater than zero"):
        transaction_service.award_points(db_session, actor_id="tutor", student_id="student", points=0)


def test_redeem_checks_calculated_balance(db_session, people, period):
    transaction_service.award_points(db_session, actor_id="tutor", student_id="student", points=50)

    with pytest.raises(LedgerRuleViolation, match="exceed available balance"):
        transaction_service.redeem_points(db_session, actor_id="tutor", student_id="student", points=60)

    transaction, remaining = transaction_service.redeem_points(
        db_session, actor_id="tutor", student_id="student", points=20, reason="store"
    )

    assert transaction.type == TransactionType.REDEEM
    assert remaining == 30
    assert people["student"].points == 30
    assert balance_service.calculate_user_points(db_session, "student") == 30
    assert balance_service.calculate_user_experience(db_session, "student") == 50


def test_record_experience(db_session, people, period):
    transaction_service.award_points(db_session, actor_id="tutor", student_id="student", points=30)
    transaction = transaction_service.record_experience(
        db_session, actor_id="tutor", student_id="student", amount=10
    )

    assert transaction.period_id == period.id
    assert balance_service.calculate_user_experience(db_session, "student") == 40

    with pytest.raises(LedgerRuleViolation, match="must not be zero"):
        transaction_service.record_experience(db_session, actor_id="tutor", student_id="student", amount=0)


def test_list_transactions(db_session, factory, people, period):
    factory.points(people["student"], people["tutor"], period, 10)
    factory.points(people["student"], people["tutor"], period, 20, rolled_back=True)
    factory.experience(people["student"], people["tutor"], period, 3, rolled_back=True)

    everything = transaction_service.list_points_transactions(db_session, student_id="student")
    live = transaction_service.list_points_transactions(db_session, student_id="student", include_rolled_back=False)
    experience = transaction_service.list_experience_transactions(
        db_session, period_id=period.id, include_rolled_back=False
    )

    assert len(everything) == 2
    assert [row.points for row in live] == [10]
    assert experience == []


def test_rollback_points_award(db_session, people, period):
    award = transaction_service.award_points(db_session, actor_id="tutor", student_id="student", points=30)
    transaction_service.award_points(db_session, actor_id="tutor", student_id="student", points=50)

    rollback = rollback_service.rollback_transaction(
        db_session,
        admin_id="admin",
        transaction_id=award.id,
        transaction_type=LedgerKind.POINTS,
        reason="Awarded twice",
    )

    assert rollback.student_id == "student"
    assert award.rolled_back is True
    assert people["student"].points == 50
    assert balance_service.calculate_user_points(db_session, "student") == 50
    assert balance_service.calculate_user_experience(db_session, "student") == 50
    assert len(transaction_service.list_points_transactions(db_session, student_id="student")) == 2


def test_rollback_experience(db_session, people, period):
    entry = transaction_service.record_experience(db_session, actor_id="tutor", student_id="student", amount=12)

    rollback_service.rollback_transaction(
        db_session,
        admin_id="admin",
        transaction_id=entry.id,
        transaction_type=LedgerKind.EXPERIENCE,
        reason="Wrong student",
    )

    assert entry.rolled_back is True
    assert people["student"].experience == 0
    assert balance_service.calculate_user_experience(db_session, "student") == 0


def test_rollback_rules(db_session, people, period):
    award = transaction_service.award_points(db_session, actor_id="tutor", student_id="student", points=30)

    with pytest.raises(LedgerRuleViolation) as excinfo:
        rollback_service.rollback_transaction(
            db_session, admin_id="tutor", transaction_id=award.id, transaction_type=LedgerKind.POINTS, reason="x"
        )
    assert excinfo.value.status_code == 403

    with pytest.raises(LedgerRuleViolation) as excinfo:
        rollback_service.rollback_transaction(
            db_session, admin_id="admin", transaction_id="missing", transaction_type=LedgerKind.POINTS, reason="x"
        )
    assert excinfo.value.status_code == 404

    with pytest.raises(LedgerRuleViolation, match="reason is required"):
        rollback_service.rollback_transaction(
            db_session, admin_id="admin", transaction_id=award.id, transaction_type=LedgerKind.POINTS, reason="  "
        )

    rollback_service.rollback_transaction(
        db_session, admin_id="admin", transaction_id=award.id, transaction_type=LedgerKind.POINTS, reason="dup"
    )
    with pytest.raises(LedgerRuleViolation) as excinfo:
        rollback_service.rollback_transaction(
            db_session, admin_id="admin", transaction_id=award.id, transaction_type=LedgerKind.POINTS, reason="dup"
        )
    assert excinfo.value.status_code == 409

    history = rollback_service.list_rollbacks(db_session, admin_id="admin")
    assert [entry.transaction_id for entry in history] == [award.id]


def test_redeem_refuses_when_balance_is_unavailable(db_session, monkeypatch, people, period):
    transaction_service.award_points(db_session, actor_id="tutor", student_id="student", points=50)

    def unavailable(session, user_id, period_id=None):
        return Aggregation(0, degraded=True)

    monkeypatch.setattr(balance_service, "aggregate_user_points", unavailable)

    with pytest.raises(LedgerRuleViolation) as excinfo:
        transaction_service.redeem_points(db_session, actor_id="tutor", student_id="student", points=10)

    assert excinfo.value.status_code == 503
    assert people["student"].points == 50
    assert transaction_service.list_points_transactions(db_session, student_id="student")[0].type == (
        TransactionType.AWARD
    )


def test_experience_rollback_keeps_mirror_non_negative(db_session, people, period):
    entry = transaction_service.record_experience(db_session, actor_id="tutor", student_id="student", amount=12)
    people["student"].experience = 0
    db_session.flush()

    rollback_service.rollback_transaction(
        db_session,
        admin_id="admin",
        transaction_id=entry.id,
        transaction_type=LedgerKind.EXPERIENCE,
        reason="Counters were reset",
    )

    assert people["student"].experience == 0


def test_rollback_history_is_admin_only(db_session, people, period):
    with pytest.raises(LedgerRuleViolation) as excinfo:
        rollback_service.list_rollbacks(db_session, admin_id="tutor")
    assert excinfo.value.status_code == 403

    assert rollback_service.list_rollbacks(db_session, admin_id="admin") == []
