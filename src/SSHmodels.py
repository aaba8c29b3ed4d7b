import numpy as np
import scipy.sparse as sp
from scipy.linalg import eigh, LinAlgError
from collections import namedtuple


class SSHError(Exception):
    pass


class InvalidConfiguration(SSHError, ValueError):
    # raised for a chain with no unit cells
    pass


class InsufficientSpectrumSize(SSHError, ValueError):
    # raised when the spectrum has fewer states than the branches we want to record
    pass


class NumericalNonConvergence(SSHError, RuntimeError):
    # raised when the eigensolver fails to converge
    pass


EdgeState = namedtuple('EdgeState', ['index', 'energy', 'boundary_weight'])


class LatticeConfig:
    # Open boundary SSH chain with Ncells unit cells.
    # Sites are ordered a_0, b_0, a_1, b_1, ... so site 2n is on sublattice A
    # and site 2n+1 is on sublattice B of cell n.

    def __init__(self, Ncells, v, w):
        try:
            is_integer = not isinstance(Ncells, bool) and int(Ncells) == Ncells
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidConfiguration(f"Ncells must be an integer, got {Ncells!r}") from e
        if not is_integer:
            raise InvalidConfiguration(f"Ncells must be an integer, got {Ncells!r}")
        if Ncells < 1:
            raise InvalidConfiguration(f"Ncells must be at least 1, got {Ncells}")
        self.Ncells = int(Ncells)
        self.v = v # intracell hopping strength
        self.w = w # intercell hopping strength

    @property
    def Nsites(self):
        return 2 * self.Ncells

    def __repr__(self):
        return f"LatticeConfig(Ncells={self.Ncells}, v={self.v}, w={self.w})"


def build_ssh_hamiltonian(Ncells, v, w):
    # builds the tight binding Hamiltonian of the open SSH chain
    #
    #  H = [ 0  -v             ]
    #      [-v   0  -w         ]
    #      [    -w   0  -v     ]
    #      [        -v   0 ... ]
    #
    # args:
    #  Ncells: number of unit cells (2 sites each)
    #  v: intracell hopping, bond (2n, 2n+1)
    #  w: intercell hopping, bond (2n+1, 2n+2), absent after the last cell
    #
    # returns:
    #  H: real symmetric scipy sparse matrix (csr) of shape (2*Ncells, 2*Ncells)
    config = LatticeConfig(Ncells, v, w)
    L = config.Nsites

    off_diag = np.zeros(L - 1)
    off_diag[0::2] = -v # intracell hopping
    off_diag[1::2] = -w # intercell hopping

    H = sp.diags([off_diag, off_diag], [-1, 1], shape=(L, L), format='csr')

    return H


def find_eigenvalues(operator):
    # dense symmetric diagonalisation of the Hamiltonian
    #
    # returns:
    #  eigvals: ascending eigenvalues
    #  eigvecs: orthonormal eigenvectors as columns, eigvecs[:, i] belongs to eigvals[i]
    #
    # The sign of each eigenvector, and the basis picked inside a degenerate
    # subspace, are whatever LAPACK returns.
    if sp.issparse(operator):
        operator_dense = operator.toarray()
    else:
        operator_dense = np.asarray(operator)

    if operator_dense.ndim != 2 or operator_dense.shape[0] != operator_dense.shape[1]:
        raise ValueError(f"operator must be a square matrix, got shape {operator_dense.shape}")
    if not np.allclose(operator_dense, operator_dense.T):
        raise ValueError("operator is not symmetric")

    try:
        eigvals, eigvecs = eigh(operator_dense)
    except LinAlgError as e:
        raise NumericalNonConvergence(f"eigh failed on a {operator_dense.shape[0]}x{operator_dense.shape[0]} matrix: {e}") from e

    return eigvals, eigvecs


def compute_IPR(eigvecs):
    # computes the inverse participation ratio for a set of eigenvectors
    # IPR(psi) = sum_i |psi_i|^4
    IPRs = np.sum(np.abs(eigvecs)**4, axis=0)
    return IPRs


def boundary_weights(eigvecs, edge_size_sites=2):
    # probability on the first and last edge_size_sites sites of every eigenvector.
    # Windows are clamped to the chain, so for very short chains they overlap.
    Nsites = eigvecs.shape[0]
    n_edge = min(edge_size_sites, Nsites)
    probabilities = np.abs(eigvecs)**2
    p_left = np.sum(probabilities[:n_edge, :], axis=0)
    p_right = np.sum(probabilities[max(0, Nsites - edge_size_sites):, :], axis=0)
    return p_left, p_right


def detect_edge_states(eigvals, eigvecs, energy_tol=1e-2, edge_weight_thresh=0.2, edge_size_sites=2, report_energies=False, return_states=False):
    # flags eigenstates that carry a large fraction of their weight on either end of the chain
    #
    # args:
    #  eigvals, eigvecs: spectrum from find_eigenvalues
    #  energy_tol: kept for compatibility with the old zero-energy criterion, not used
    #  edge_weight_thresh: minimum max(p_left, p_right) for a state to count as an edge state
    #  edge_size_sites: number of sites at each end that make up the edge
    #  report_energies: print the sorted energies of the detected states
    #  return_states: also return a list of EdgeState records
    #
    # returns:
    #  edge_indices: sorted indices into eigvals of the detected states
    #  count: number of detected states
    #  (states: EdgeState records, only if return_states)
    p_left, p_right = boundary_weights(eigvecs, edge_size_sites)
    edge_weight = np.maximum(p_left, p_right)

    edge_indices = np.unique(np.flatnonzero(edge_weight >= edge_weight_thresh))
    count = len(edge_indices)

    if report_energies and count > 0:
        edge_energies = np.sort(eigvals[edge_indices])
        print(f"Detected edge-state energies: {[float(f'{E:.6g}') for E in edge_energies]}", flush=True)

    if return_states:
        states = [EdgeState(int(i), float(eigvals[i]), float(edge_weight[i])) for i in edge_indices]
        return edge_indices, count, states
    return edge_indices, count
