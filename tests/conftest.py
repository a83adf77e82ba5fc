"""Pytest configuration and shared fixtures for engine tests."""

import os
from decimal import Decimal

# Set test database URL BEFORE any imports from src
# This ensures the SessionLocal and engine use an in-memory database
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.models import (  # noqa: E402
    AllocationRule,
    Base,
    Community,
    Expense,
    ExpenseTargetType,
    Period,
    PeriodMeasure,
    Unit,
)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session of a test."""
    test_engine = create_engine(
        "sqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(test_engine)
    yield test_engine
    Base.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    """Provide a test database session with all tables created."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def community(db_session):
    community = Community(code="C1", name="Maple Court", default_currency="RON")
    db_session.add(community)
    db_session.commit()
    return community


@pytest.fixture
def period(db_session, community):
    period = Period(community_id=community.id, code="2025-05", seq=5)
    db_session.add(period)
    db_session.commit()
    return period


@pytest.fixture
def units(db_session, community):
    """Three units: A1, A2, A3."""
    created = [Unit(community_id=community.id, code=f"A{i}") for i in range(1, 4)]
    db_session.add_all(created)
    db_session.commit()
    return created


@pytest.fixture
def equal_rule(db_session, community):
    rule = AllocationRule(community_id=community.id, code="EQ", method="EQUAL", is_default=True)
    db_session.add(rule)
    db_session.commit()
    return rule


@pytest.fixture
def add_expense(db_session, community, period):
    """Factory creating a committed expense in the fixture period."""

    def _add(
        amount: str,
        target_type: str = ExpenseTargetType.COMMUNITY.value,
        target_id: int | None = None,
        expense_type_id: int | None = None,
        description: str = "Shared cost",
        period_id: int | None = None,
    ) -> Expense:
        expense = Expense(
            community_id=community.id,
            period_id=period_id or period.id,
            description=description,
            allocatable_amount=Decimal(amount),
            currency="RON",
            target_type=target_type,
            target_id=community.id if target_id is None else target_id,
            expense_type_id=expense_type_id,
        )
        db_session.add(expense)
        db_session.commit()
        return expense

    return _add


@pytest.fixture
def add_measure(db_session, community, period):
    """Factory recording a UNIT-scoped measurement for the fixture period."""

    def _add(unit: Unit, type_code: str, value: str, period_id: int | None = None) -> PeriodMeasure:
        measure = PeriodMeasure(
            community_id=community.id,
            period_id=period_id or period.id,
            scope_type="UNIT",
            scope_id=unit.id,
            type_code=type_code,
            value=Decimal(value),
        )
        db_session.add(measure)
        db_session.commit()
        return measure

    return _add
