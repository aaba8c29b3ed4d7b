"""
Shared fixtures for the SSH edge state tests.

src/ is put on the path here so the flat modules import without installing.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


@pytest.fixture(autouse=True)
def seeded_rotations():
    """Random eigenvector rotations and sign flips are the same on every run"""
    np.random.seed(42)


@pytest.fixture
def temp_data_dir(tmp_path):
    """Directory for .npz results, parameter files and figures written by a test"""
    data_dir = tmp_path / "ssh_output"
    data_dir.mkdir()
    return data_dir


def pytest_collection_modifyitems(config, items):
    # scenario tests check the physics of the two phases, pool tests start worker processes
    for item in items:
        name = item.nodeid.lower()
        if "scenario" in name or "physical" in name:
            item.add_marker(pytest.mark.physics)
        if "pool" in name or "large" in name:
            item.add_marker(pytest.mark.slow)
