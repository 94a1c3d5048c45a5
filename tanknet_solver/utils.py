import numpy as np
import pandas as pd

def check_jacobian(f, jac, x, v, steps=None):
    """
    Compare a Jacobian-vector product against forward finite differences.

    Inputs:
    -------
    f : function
        Function f(x) returning a vector
    jac : function
        Function jac(x, v) returning the Jacobian of f at x applied to v
    x : np.ndarray
        Point at which to linearize
    v : np.ndarray
        Direction of perturbation
    steps : sequence of float (optional)
        Finite difference step sizes (defaults to 1e-1, ..., 1e-8)

    Returns:
    --------
    pd.DataFrame
        One row per step size with fields `step`, `norm_jv`, `norm_fd` and
        `error` (norm of the difference between Jacobian product and finite
        difference).
    """
    if steps is None:
        steps = 10.0 ** -np.arange(1, 9)
    x = np.asarray(x, dtype=float)
    v = np.asarray(v, dtype=float)
    f_x = np.asarray(f(x), dtype=float)
    jv = np.asarray(jac(x, v), dtype=float)
    records = []
    for t in steps:
        fd = (np.asarray(f(x + t * v), dtype=float) - f_x) / t
        records.append({
            'step' : t,
            'norm_jv' : np.linalg.norm(jv),
            'norm_fd' : np.linalg.norm(fd),
            'error' : np.linalg.norm(jv - fd)
        })
    return pd.DataFrame.from_records(records, columns=['step', 'norm_jv', 'norm_fd', 'error'])
