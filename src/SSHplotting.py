import os
import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.ticker import MaxNLocator

ENERGY_FIGURE = 'ssh_energy_vs_w.png'
EDGECOUNT_FIGURE = 'ssh_edgecount_vs_w.png'


def plot_energy_vs_w(result, filename=ENERGY_FIGURE):
    # one line per recorded branch, branch k is the k-th smallest |E| at each w
    fig, ax = plt.subplots(figsize=(8, 6), constrained_layout=True)
    for k in range(result.lowest_energies.shape[0]):
        ax.plot(result.w_values, result.lowest_energies[k, :], lw=1.5, label='lowest states' if k == 0 else None)
    ax.set_xlabel('w')
    ax.set_ylabel('E (eigenvalues)')
    ax.set_title(f'SSH (OBC): low-energy spectrum vs w (v={result.v}, Ncells={result.Ncells})')
    ax.legend()
    ax.grid(True)
    fig.savefig(filename)
    plt.close(fig)
    return filename


def plot_edgecount_vs_w(result, filename=EDGECOUNT_FIGURE):
    fig, ax = plt.subplots(figsize=(8, 6), constrained_layout=True)
    ax.step(result.w_values, result.edge_counts, where='pre')
    ax.set_xlabel('w')
    ax.set_ylabel('# edge states')
    ax.set_title('Number of edge states vs w')
    ax.set_ylim(-0.2, 4.2)
    ax.yaxis.set_major_locator(MaxNLocator(integer=True))
    ax.grid(True)
    fig.savefig(filename)
    plt.close(fig)
    return filename


def plot_sweep(result, output_dir='.'):
    # writes both sweep figures into output_dir, existing files are overwritten
    os.makedirs(output_dir, exist_ok=True)
    energy_path = plot_energy_vs_w(result, os.path.join(output_dir, ENERGY_FIGURE))
    edgecount_path = plot_edgecount_vs_w(result, os.path.join(output_dir, EDGECOUNT_FIGURE))
    return energy_path, edgecount_path


def plot_edge_state_profile(eigvals, eigvecs, edge_indices, filename):
    # |psi|^2 against site index for the detected edge states
    fig, ax = plt.subplots(figsize=(8, 6), constrained_layout=True)
    sites = np.arange(eigvecs.shape[0])
    for i in edge_indices:
        ax.plot(sites, np.abs(eigvecs[:, i])**2, marker='o', markersize=3, label=f'E = {eigvals[i]:.3g}')
    ax.set_xlabel('site')
    ax.set_ylabel(r'$|\psi|^2$')
    ax.set_title('Edge state probability density')
    if len(edge_indices) > 0:
        ax.legend()
    ax.grid(True)
    fig.savefig(filename)
    plt.close(fig)
    return filename
