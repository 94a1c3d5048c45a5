import numpy as np
from tanknet_solver.banded import BandedMatrix
from tanknet_solver.tankstate import TankState
from tanknet_solver._ntankstate import (SQRT_LAW, LINEAR_LAW, numba_outflow,
                                        numba_outflow_derivative, numba_route,
                                        numba_level_band, numba_forward_sweep)

class nTankState(TankState):
    """
    Numba implementation of the theta-method tank network model.

    Accepts the same inputs as `tanknet_solver.tankstate.TankState` and
    produces the same results. The valve law and its derivative, routing,
    assembly of linearized level operators and the forward substitution of
    the level solve run in compiled kernels.
    """
    @property
    def _law_code(self):
        if self.valve_law == 'sqrt':
            return SQRT_LAW
        return LINEAR_LAW

    def outflow(self, h):
        h = _kernel_array(h)
        return numba_outflow(h, self.Cv, self.rho, self.g, self._law_code)

    def outflow_derivative(self, h):
        h = _kernel_array(h)
        return numba_outflow_derivative(h, self.Cv, self.rho, self.g, self._law_code)

    def route(self, Qout, z):
        Qout = _kernel_array(Qout)
        z = _kernel_array(z)
        p = _kernel_array(self.p)
        return numba_route(Qout, z, p, self.rows, self.cols)

    def level_operator(self, h, beta):
        # Import instance variables
        rows = self.rows              # Number of tank rows
        cols = self.cols              # Number of tank columns
        l = self.G.l                  # Lower bandwidth of network operators
        dq = self.outflow_derivative(h)
        p = _kernel_array(self.p)
        AB = numba_level_band(dq, p, float(beta), rows, cols, l)
        return BandedMatrix(AB, l, 0)

    def _forward_sweep(self, b, z):
        b = _kernel_array(b)
        z = _kernel_array(z)
        p = _kernel_array(self.p)
        return numba_forward_sweep(b, z, p, self.rows, self.cols, self.betaR,
                                   self.Cv, self.rho, self.g, self._law_code)

def _kernel_array(x):
    # Compiled signatures require writeable contiguous float64 arrays
    return np.require(np.asarray(x, dtype=np.float64).ravel(), dtype=np.float64,
                      requirements=['C', 'W'])
