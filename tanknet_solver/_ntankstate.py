import numpy as np
from numba import njit
from numba.types import float64, int64

# Valve law codes
SQRT_LAW = 0
LINEAR_LAW = 1

@njit(float64[:](float64[:], float64, float64, float64, int64),
      cache=True)
def numba_outflow(h, Cv, rho, g, law):
    n = h.size
    Qout = np.zeros(n)
    for k in range(n):
        h_k = h[k]
        if h_k > 0:
            if law == SQRT_LAW:
                Qout[k] = Cv * np.sqrt(rho * g * h_k)
            else:
                Qout[k] = Cv * rho * g * h_k
    return Qout

@njit(float64[:](float64[:], float64, float64, float64, int64),
      cache=True)
def numba_outflow_derivative(h, Cv, rho, g, law):
    n = h.size
    dq = np.zeros(n)
    for k in range(n):
        h_k = h[k]
        if h_k > 0:
            if law == SQRT_LAW:
                dq[k] = Cv * rho * g / (2 * np.sqrt(rho * g * h_k))
            else:
                dq[k] = Cv * rho * g
    return dq

@njit(float64[:](float64[:], float64[:], float64[:], int64, int64),
      cache=True)
def numba_route(Qout, z, p, rows, cols):
    n = rows * cols
    Qin = np.zeros(n)
    for r in range(rows):
        for c in range(cols):
            k = cols * r + c
            Q_k = z[k]
            if r > 0:
                Q_k += 0.5 * p[k - cols] * Qout[k - cols]
            if c > 0:
                Q_k += 0.5 * p[k - 1] * Qout[k - 1]
            Qin[k] = Q_k
    return Qin

@njit(float64[:,:](float64[:], float64[:], float64, int64, int64, int64),
      cache=True)
def numba_level_band(dq, p, beta, rows, cols, l):
    # Band storage of I + beta * (I - W) @ diag(dq), lower bandwidth l
    n = rows * cols
    AB = np.zeros((l + 1, n))
    for r in range(rows):
        for c in range(cols):
            k = cols * r + c
            AB[0, k] = 1.0 + beta * dq[k]
            if c > 0:
                AB[1, k - 1] = -0.5 * beta * p[k - 1] * dq[k - 1]
            if r > 0:
                AB[cols, k - cols] = -0.5 * beta * p[k - cols] * dq[k - cols]
    return AB

@njit(float64[:](float64[:], float64[:], float64[:], int64, int64, float64,
                 float64, float64, float64, int64),
      cache=True)
def numba_forward_sweep(b, z, p, rows, cols, betaR, Cv, rho, g, law):
    n = rows * cols
    h = np.zeros(n)
    Qout = np.zeros(n)
    a = betaR * Cv * np.sqrt(rho * g)
    # Row-major order visits every tank after its upstream neighbours
    for r in range(rows):
        for c in range(cols):
            k = cols * r + c
            Q_k = z[k]
            if r > 0:
                Q_k += 0.5 * p[k - cols] * Qout[k - cols]
            if c > 0:
                Q_k += 0.5 * p[k - 1] * Qout[k - 1]
            rhs = b[k] + betaR * Q_k
            if rhs > 0:
                if law == SQRT_LAW:
                    s = 2 * rhs / (a + np.sqrt(a * a + 4 * rhs))
                    h[k] = s * s
                    Qout[k] = Cv * np.sqrt(rho * g * h[k])
                else:
                    h[k] = rhs / (1 + betaR * Cv * rho * g)
                    Qout[k] = Cv * rho * g * h[k]
            else:
                h[k] = rhs
    return h
