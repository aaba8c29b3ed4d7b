import numpy as np
from multiprocessing import Pool
import datetime
import os

from SSHmodels import (
    LatticeConfig,
    InsufficientSpectrumSize,
    build_ssh_hamiltonian,
    find_eigenvalues,
    detect_edge_states,
    compute_IPR,
)

NUM_BRANCHES = 6 # number of smallest |E| eigenvalues recorded at every sweep point


class SweepResult:
    # Output tables of a sweep over the intercell hopping w.
    # Column j of lowest_energies and entry j of edge_counts belong to w_values[j].

    def __init__(self, w_values, lowest_energies, edge_counts, Ncells=None, v=None, energy_tol=None):
        self.w_values = np.asarray(w_values, dtype=float)
        self.lowest_energies = np.asarray(lowest_energies, dtype=float)
        self.edge_counts = np.asarray(edge_counts, dtype=int)
        self.Ncells = Ncells
        self.v = v
        self.energy_tol = energy_tol

    def __len__(self):
        return len(self.w_values)

    def save(self, filename):
        # metadata left as None is not written, load restores it as None
        metadata = {key: value for key, value in
                    [('Ncells', self.Ncells), ('v', self.v), ('energy_tol', self.energy_tol)] if value is not None}
        np.savez(filename, w_values=self.w_values, lowest_energies=self.lowest_energies,
                 edge_counts=self.edge_counts, **metadata)

    @classmethod
    def load(cls, filename):
        with np.load(filename) as data:
            Ncells = int(data['Ncells']) if 'Ncells' in data.files else None
            v = float(data['v']) if 'v' in data.files else None
            energy_tol = float(data['energy_tol']) if 'energy_tol' in data.files else None
            return cls(data['w_values'], data['lowest_energies'], data['edge_counts'],
                       Ncells=Ncells, v=v, energy_tol=energy_tol)


def transition_onset(result, min_count=2):
    # first w of the trailing run of points with at least min_count edge states.
    # Looking at the trailing run skips w = 0, where the end dimers are counted.
    # Returns None if the last point has fewer than min_count edge states.
    below = np.flatnonzero(result.edge_counts < min_count)
    if len(below) == 0:
        return result.w_values[0] if len(result) > 0 else None
    if below[-1] == len(result) - 1:
        return None
    return result.w_values[below[-1] + 1]


def read_parameters(filename):
    # reads a 'key = value' parameter file, lines starting with # are ignored.
    # Values are left as strings, cast them where they are used.
    parameters = {}
    with open(filename, 'r') as f:
        for line in f:
            if line.strip() and not line.strip().startswith('#'):
                key, value = line.split('=', 1)
                parameters[key.strip()] = value.strip()
    return parameters


def result_filename(Ncells, v, w_values, directory='.'):
    current_date = datetime.datetime.now().strftime("%Y-%m-%d-%H%M%S")
    name = f"1dSSHEdge_Ncells{Ncells}_v{v}_w{w_values[0]}-{w_values[-1]}_points{len(w_values)}_{current_date}_results.npz"
    return os.path.join(directory, name)


def lowest_magnitude_energies(eigvals, num=NUM_BRANCHES):
    # the num eigenvalues closest to zero, signed, ordered by |E|
    abs_sorted_idx = np.argsort(np.abs(eigvals), kind='stable')
    return eigvals[abs_sorted_idx[:num]]


def single_iteration(args):
    Ncells, v, w, energy_tol, edge_weight_thresh, edge_size_sites, j = args
    H = build_ssh_hamiltonian(Ncells, v, w)
    eigvals, eigvecs = find_eigenvalues(H)
    lowest = np.full(NUM_BRANCHES, np.nan)
    energies = lowest_magnitude_energies(eigvals)
    lowest[:len(energies)] = energies
    _, count = detect_edge_states(eigvals, eigvecs, energy_tol=energy_tol,
                                  edge_weight_thresh=edge_weight_thresh, edge_size_sites=edge_size_sites)
    if j % 100 == 0:
        print(f"            Completed sweep point {j} (w = {w:.4f})", flush=True)
    return j, lowest, count


def sweep_w(Ncells, v, w_values, energy_tol=1e-3, processes=1, skip_insufficient=False, edge_weight_thresh=0.2, edge_size_sites=2):
    # sweeps the intercell hopping w at fixed Ncells and v
    #
    # args:
    #  Ncells, v: chain length and intracell hopping, fixed for the sweep
    #  w_values: intercell hoppings, in the order they should appear in the result
    #  energy_tol: passed through to detect_edge_states, which does not use it
    #  processes: number of worker processes, 1 runs everything in this process
    #  skip_insufficient: for chains with fewer than 6 sites, pad the missing branches
    #   with NaN instead of raising InsufficientSpectrumSize
    #
    # returns:
    #  SweepResult with the 6 smallest |E| eigenvalues and the edge state count at every w
    config = LatticeConfig(Ncells, v, 0.0)
    if config.Nsites < NUM_BRANCHES:
        if not skip_insufficient:
            raise InsufficientSpectrumSize(
                f"need at least {NUM_BRANCHES} sites to record {NUM_BRANCHES} branches, chain has {config.Nsites}")
        print(f"WARNING: chain has only {config.Nsites} sites, branches beyond {config.Nsites} are recorded as NaN", flush=True)

    w_values = np.asarray(w_values, dtype=float)
    Nw = len(w_values)
    lowest_energies = np.zeros((NUM_BRANCHES, Nw))
    edge_counts = np.zeros(Nw, dtype=int)

    args_list = [(config.Ncells, v, w, energy_tol, edge_weight_thresh, edge_size_sites, j) for j, w in enumerate(w_values)]

    if processes is not None and processes > 1 and Nw > 1:
        with Pool(processes=processes, maxtasksperchild=10) as pool:
            results = list(pool.imap(single_iteration, args_list, chunksize=1))
    else:
        results = [single_iteration(args) for args in args_list]

    for j, lowest, count in results:
        lowest_energies[:, j] = lowest
        edge_counts[j] = count

    return SweepResult(w_values, lowest_energies, edge_counts, Ncells=config.Ncells, v=v, energy_tol=energy_tol)


def run_regression_checks(Ncells=40, energy_tol=1e-2):
    # Quick sanity check on the two phases.
    # Topological (w > v) should give at least 2 edge states, trivial (v > w) none.
    # Mismatches are only printed.
    print("Running edge state regression checks...", flush=True)

    v, w = 1.0, 1.5
    H = build_ssh_hamiltonian(Ncells, v, w)
    eigvals, eigvecs = find_eigenvalues(H)
    # looser threshold to catch states that leak into the bulk on a finite chain
    edge_idx, cnt_top = detect_edge_states(eigvals, eigvecs, energy_tol=energy_tol, edge_weight_thresh=0.15, report_energies=True)
    print(f"v={v}, w={w} -> edge states detected: {cnt_top} (expected 2)", flush=True)
    if cnt_top > 0:
        print(f"    mean IPR of detected states: {compute_IPR(eigvecs[:, edge_idx]).mean():.4f}", flush=True)

    v2, w2 = 1.5, 0.5
    H2 = build_ssh_hamiltonian(Ncells, v2, w2)
    eigvals2, eigvecs2 = find_eigenvalues(H2)
    _, cnt_triv = detect_edge_states(eigvals2, eigvecs2, energy_tol=energy_tol)
    print(f"v={v2}, w={w2} -> edge states detected: {cnt_triv} (expected 0)", flush=True)

    if cnt_top < 2:
        print(f"WARNING: expected 2 edge states in the topological phase, detected: {cnt_top}", flush=True)
    if cnt_triv > 0:
        print(f"WARNING: expected 0 edge states in the trivial phase, detected: {cnt_triv}", flush=True)

    return cnt_top, cnt_triv
