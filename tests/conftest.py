from __future__ import annotations

import pytest

from abanalysis import GroupSummary, manual_summary


@pytest.fixture
def default_control() -> GroupSummary:
    return manual_summary(mean=55.0, std=10.0, size=10_000)


@pytest.fixture
def default_test() -> GroupSummary:
    return manual_summary(mean=66.0, std=40.0, size=100)


@pytest.fixture
def control_csv(tmp_path):
    path = tmp_path / "control.csv"
    path.write_text("id,control\n1,10\n2,12\n3,\n4,abc\n5,14\n")
    return path
