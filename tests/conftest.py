"""
Pytest configuration and fixtures for QuarterPick tests.

Date cheat sheet (2024, Sunday-first weekdays):
- 2024-01-08 Mon  Q1  moq=1 period=1
- 2024-02-05 Mon  Q1  moq=2 period=1
- 2024-04-09 Tue  Q2  moq=1 period=1
- 2024-05-13 Mon  Q2  moq=2 period=2
- 2024-05-15 Wed  Q2  moq=2 period=2
- 2024-06-26 Wed  Q2  moq=3 period=3
- 2024-09-23 Mon  Q3  moq=3 period=3
"""
import pytest
from datetime import date

from quarterpick.engine import SelectionEngine, SelectionStore
from quarterpick.models import QuarterlyPlusMonthly, SelectionKind


# =============================================================================
# Dates
# =============================================================================

Q2_COARSE = date(2024, 4, 9)
Q2_FINE_MAY = date(2024, 5, 15)
Q2_FINE_JUNE = date(2024, 6, 26)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def engine() -> SelectionEngine:
    """Fresh engine in quarterly-only mode with the default rules."""
    return SelectionEngine()


@pytest.fixture
def monthly_engine() -> SelectionEngine:
    """Engine in quarterly + monthly mode, producing coarse selections."""
    return SelectionEngine(mode=QuarterlyPlusMonthly(active=SelectionKind.COARSE))


@pytest.fixture
def q2_engine(monthly_engine: SelectionEngine) -> SelectionEngine:
    """Q2 2024 holding a coarse anchor and two monthly selections."""
    assert monthly_engine.commit(Q2_COARSE).accepted
    monthly_engine.set_active_kind(SelectionKind.FINE)
    assert monthly_engine.commit(Q2_FINE_MAY).accepted
    assert monthly_engine.commit(Q2_FINE_JUNE).accepted
    return monthly_engine


@pytest.fixture
def store() -> SelectionStore:
    return SelectionStore()


@pytest.fixture
def state_file(tmp_path):
    """Path of a (not yet existing) CLI state file."""
    return tmp_path / "state.json"
