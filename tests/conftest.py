import pytest

from cleancode.services.planning_service import CodePlanningEngine


@pytest.fixture
def engine():
    return CodePlanningEngine(log_steps=True)
