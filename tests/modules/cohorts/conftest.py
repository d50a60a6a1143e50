"""
Fixtures for cohort tests.
"""

from datetime import date
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from academy.modules.cohorts.models import Cohort


def make_cohort(name="Spring 2024", start=date(2024, 1, 1), end=date(2024, 1, 14)):
    cohort = MagicMock(spec=Cohort)
    cohort.id = str(uuid4())
    cohort.name = name
    cohort.start_date = start
    cohort.end_date = end
    cohort.sessions = 0
    return cohort


@pytest.fixture
def sample_cohort():
    """A two-week cohort starting Monday 2024-01-01."""
    return make_cohort()


@pytest.fixture
def cohort_factory():
    return make_cohort
