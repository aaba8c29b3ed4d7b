# Set environment variables to make sure pool behaves, otherwise every worker grabs all the BLAS threads
import os
os.environ['OMP_NUM_THREADS'] = '1'
os.environ['OPENBLAS_NUM_THREADS'] = '1'
os.environ['MKL_NUM_THREADS'] = '1'
os.environ['VECLIB_MAXIMUM_THREADS'] = '1'
os.environ['NUMEXPR_NUM_THREADS'] = '1'

import numpy as np
import time
import sys
sys.path.append(os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'src'))
from SSHsweep import read_parameters, sweep_w, run_regression_checks, result_filename
from SSHplotting import plot_sweep


if __name__ == "__main__":
    processes = int(sys.argv[1]) if len(sys.argv) > 1 else 1
    parameters_file = sys.argv[2] if len(sys.argv) > 2 else None

    print("-"*50)
    print("SSH chain with open boundaries: low-energy spectrum and edge states vs w")
    print("-"*50)

    parameters = read_parameters(parameters_file) if parameters_file else {}

    Ncells = int(parameters.get('Ncells', 40))
    v = float(parameters.get('v', 1.0))
    w_start = float(parameters.get('w_start', 0.0))
    w_end = float(parameters.get('w_end', 2.0))
    w_resolution = int(parameters.get('w_resolution', 301))
    energy_tol = float(parameters.get('energy_tol', 1e-3))
    output_dir = parameters.get('output_dir', '.')
    data_dir = parameters.get('data_dir', output_dir)
    save_results = parameters.get('save_results', 'False').lower() == 'true'

    if parameters_file:
        print(f"Parameters loaded from {parameters_file}")
    print(f"Ncells = {Ncells}, v = {v}")
    print(f"w from {w_start} to {w_end} with {w_resolution} steps, using {processes} process(es)")
    print("-"*50, flush=True)

    w_values = np.linspace(w_start, w_end, w_resolution)

    total_time = time.time()
    result = sweep_w(Ncells, v, w_values, energy_tol=energy_tol, processes=processes)
    print(f"Total time for sweep: {time.time() - total_time:.2f} seconds", flush=True)

    energy_path, edgecount_path = plot_sweep(result, output_dir)
    print(f"Saved figures: {energy_path} and {edgecount_path}", flush=True)

    if save_results:
        os.makedirs(data_dir, exist_ok=True)
        filename = result_filename(Ncells, v, w_values, data_dir)
        result.save(filename)
        print(f"Results saved to {filename}", flush=True)

    run_regression_checks()
    print("Done.")
