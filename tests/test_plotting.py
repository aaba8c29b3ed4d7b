"""
Tests for the figure export in SSHplotting.py
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from SSHmodels import build_ssh_hamiltonian, find_eigenvalues, detect_edge_states
from SSHsweep import sweep_w
from SSHplotting import (
    ENERGY_FIGURE,
    EDGECOUNT_FIGURE,
    plot_sweep,
    plot_energy_vs_w,
    plot_edgecount_vs_w,
    plot_edge_state_profile,
)


@pytest.fixture
def sweep_result():
    return sweep_w(10, 1.0, np.linspace(0.1, 2.0, 11))


class TestSweepFigures:

    def test_fixed_file_names(self):
        assert ENERGY_FIGURE == 'ssh_energy_vs_w.png'
        assert EDGECOUNT_FIGURE == 'ssh_edgecount_vs_w.png'

    def test_plot_sweep_writes_both_figures(self, sweep_result, temp_data_dir):
        energy_path, edgecount_path = plot_sweep(sweep_result, str(temp_data_dir))

        assert Path(energy_path) == temp_data_dir / ENERGY_FIGURE
        assert Path(edgecount_path) == temp_data_dir / EDGECOUNT_FIGURE
        assert Path(energy_path).stat().st_size > 0
        assert Path(edgecount_path).stat().st_size > 0

    def test_plot_sweep_creates_output_dir(self, sweep_result, temp_data_dir):
        output_dir = temp_data_dir / "figures" / "run1"
        plot_sweep(sweep_result, str(output_dir))
        assert (output_dir / ENERGY_FIGURE).exists()

    def test_existing_figures_overwritten(self, sweep_result, temp_data_dir):
        target = temp_data_dir / ENERGY_FIGURE
        target.write_bytes(b"old")
        plot_energy_vs_w(sweep_result, str(target))
        assert target.read_bytes() != b"old"

    def test_edgecount_figure(self, sweep_result, temp_data_dir):
        target = temp_data_dir / "counts.png"
        assert plot_edgecount_vs_w(sweep_result, str(target)) == str(target)
        assert target.exists()


class TestEdgeProfile:

    def test_profile_written(self, temp_data_dir):
        eigvals, eigvecs = find_eigenvalues(build_ssh_hamiltonian(20, 1.0, 1.5))
        edge_indices, _ = detect_edge_states(eigvals, eigvecs)
        target = temp_data_dir / "profile.png"
        plot_edge_state_profile(eigvals, eigvecs, edge_indices, str(target))
        assert target.exists()

    def test_profile_without_edge_states(self, temp_data_dir):
        eigvals, eigvecs = find_eigenvalues(build_ssh_hamiltonian(20, 1.5, 0.5))
        target = temp_data_dir / "profile_trivial.png"
        plot_edge_state_profile(eigvals, eigvecs, [], str(target))
        assert target.exists()
