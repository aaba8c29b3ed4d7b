import glob
import os
import sys
sys.path.append(os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'src'))
from SSHmodels import build_ssh_hamiltonian, find_eigenvalues, detect_edge_states
from SSHsweep import SweepResult, transition_onset
from SSHplotting import plot_sweep, plot_edge_state_profile

datalocation = '../data/'
figure_destination = '../figures/'


if __name__ == "__main__":
    if len(sys.argv) > 1:
        filepath = sys.argv[1]
    else:
        file_list = sorted(glob.glob(os.path.join(datalocation, '1dSSHEdge_Ncells*_results.npz')))
        if not file_list:
            print(f"Error: No data files found in '{datalocation}'.")
            sys.exit(1)
        filepath = file_list[-1]
    output_dir = sys.argv[2] if len(sys.argv) > 2 else figure_destination

    result = SweepResult.load(filepath)
    print(f"Loaded {len(result)} sweep points from {os.path.basename(filepath)}")
    print(f"Ncells = {result.Ncells}, v = {result.v}, w from {result.w_values[0]} to {result.w_values[-1]}")

    onset = transition_onset(result)
    if onset is not None:
        print(f"Edge states present from w = {onset:.4f} to the end of the sweep (v = {result.v})")
    else:
        print("Fewer than 2 edge states at the end of the sweep")

    energy_path, edgecount_path = plot_sweep(result, output_dir)
    print(f"Plots saved to: {energy_path}, {edgecount_path}")

    # edge state densities at the last sweep point
    w_last = result.w_values[-1]
    eigvals, eigvecs = find_eigenvalues(build_ssh_hamiltonian(result.Ncells, result.v, w_last))
    edge_indices, count = detect_edge_states(eigvals, eigvecs, report_energies=True)
    profile_path = plot_edge_state_profile(eigvals, eigvecs, edge_indices,
                                           os.path.join(output_dir, f'ssh_edge_profile_w{w_last:.3f}.png'))
    print(f"{count} edge states at w = {w_last:.3f}, profile saved to: {profile_path}")
