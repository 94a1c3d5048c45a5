import sys
import logging
import numpy as np
import pandas as pd
from tanknet_solver.banded import BandedMatrix

logger = logging.getLogger(__name__)

# Human-readable parameter names accepted by `TankState.from_parameters`
PARAMETER_NAMES = {
    'Number of Rows' : 'rows',
    'Number of Columns' : 'cols',
    'Valve Constant' : 'Cv',
    'Density of Fluid' : 'rho',
    'Initial Fluid Level' : 'h0',
    'Height of Tank' : 'H',
    'Cross-sectional Area of Tank' : 'A',
    'Gravity Constant' : 'g',
    'Total Time' : 'T',
    'Theta' : 'theta',
    'Number of Time Steps' : 'Nt',
    'Passthrough Coefficients' : 'passthrough',
    'Valve Law' : 'valve_law',
}

VALVE_LAWS = ('sqrt', 'linear')

class TankState():
    """
    Theta-method model of a rectangular network of gravity-drained tanks.

    Each tank (r, c) drains through a valve. A fraction `p` of its outflow is
    passed onward into the grid and split evenly between the tank below,
    (r + 1, c), and the tank to the right, (r, c + 1). Shares routed off the
    edge of the grid leave the system. Every tank also receives an external
    control inflow `z`.

    The state at one time level is a flat vector of length 3 * N (N = rows * cols)
    made of three contiguous blocks:

        |-------+--------+-------+----------------------------------|
        | Block | Offset | Unit  | Description                      |
        |-------+--------+-------+----------------------------------|
        | h     | 0      | m     | Fluid level in each tank         |
        | Qout  | N      | m^3/s | Outflow through each tank valve  |
        | Qin   | 2N     | m^3/s | Total inflow into each tank      |
        |-------+--------+-------+----------------------------------|

    Tank (r, c) sits at position `offset + cols * r + c` within its block.

    Inputs:
    -----------
    rows: int
        Number of tank rows
    cols: int
        Number of tank columns
    Cv: float
        Valve constant (discharge coefficient)
    rho: float
        Density of fluid
    h0: float
        Initial (nominal) fluid level; operators L and R are linearized here
    H: float
        Height of tanks
    A: float
        Cross-sectional area of tanks
    g: float
        Gravity constant
    T: float
        Total time horizon
    theta: float
        Implicit/explicit blending factor in [0, 1] (0: explicit, 1: implicit)
    Nt: int
        Number of time steps
    passthrough: float, np.ndarray (N) or pd.DataFrame
        Passthrough coefficients in [0, 1]. When given as a table, the following
        fields are required; tanks that are not listed keep p = 1:

        |-------+-------+------+-------------------------------------------|
        | Field | Type  | Unit | Description                               |
        |-------+-------+------+-------------------------------------------|
        | r     | int   |      | Row of the tank                           |
        | c     | int   |      | Column of the tank                        |
        | p     | float | -    | Fraction of outflow routed into the grid  |
        |-------+-------+------+-------------------------------------------|

    valve_law: str
        Outflow law: `sqrt` (Qout = Cv * sqrt(rho * g * h)) or `linear`
        (Qout = Cv * rho * g * h).

    Methods:
    -----------
    compute_flow : Update outflow and inflow blocks of a state from its levels
    value : Evaluate the time step residual
    solve_level : Advance the state by one time step
    apply_jacobian_1_old : Jacobian of residual w.r.t. old state times vector
    apply_jacobian_1_new : Jacobian of residual w.r.t. new state times vector
    apply_jacobian_2 : Jacobian of residual w.r.t. control times vector
    apply_adjoint_jacobian_1_old : Transposed old-state Jacobian times vector
    apply_adjoint_jacobian_1_new : Transposed new-state Jacobian times vector
    apply_adjoint_jacobian_2 : Transposed control Jacobian times vector
    apply_inverse_jacobian_1_new : Solve with the new-state Jacobian
    apply_inverse_adjoint_jacobian_1_new : Solve with the transposed new-state Jacobian
    print_members : Write a dump of all parameters

    Attributes:
    -----------
    N : int
        Number of tanks
    dt : float
        Time step size
    coeff1 : float
        Cv * rho * g
    kappa : float
        Cv * rho * g * dt / (2 * A)
    betaL : float
        (theta - 1) * dt / A
    betaR : float
        theta * dt / A
    W : BandedMatrix (N x N)
        Routing matrix mapping outflows to routed inflows
    G : BandedMatrix (N x N)
        I - W
    L : BandedMatrix (N x N)
        Implicit (new time level) operator at the nominal level
    R : BandedMatrix (N x N)
        Explicit (old time level) operator at the nominal level
    """
    def __init__(self, rows=3, cols=3, Cv=0.8, rho=1.0, h0=1.0, H=10.0, A=1.0,
                 g=9.8, T=10.0, theta=0.5, Nt=100, passthrough=1.0, valve_law='sqrt'):
        # Validate grid and time discretization
        self.rows = _positive_int('rows', rows)
        self.cols = _positive_int('cols', cols)
        self.Nt = _positive_int('Nt', Nt)
        # Validate physical parameters
        self.Cv = _real('Cv', Cv, lower=0.)
        self.rho = _real('rho', rho, lower=0., strict=True)
        self.H = _real('H', H, lower=0., strict=True)
        self.h0 = _real('h0', h0, lower=0., upper=self.H)
        self.A = _real('A', A, lower=0., strict=True)
        self.g = _real('g', g, lower=0., strict=True)
        self.T = _real('T', T, lower=0., strict=True)
        self.theta = _real('theta', theta, lower=0., upper=1.)
        if valve_law not in VALVE_LAWS:
            raise ValueError('Argument `valve_law` must be one of {}; got {!r}.'
                             .format(', '.join(VALVE_LAWS), valve_law))
        self.valve_law = valve_law
        # Derived quantities
        self.N = self.rows * self.cols
        self.dt = self.T / self.Nt
        self.coeff1 = self.Cv * self.rho * self.g
        self.kappa = self.coeff1 * self.dt / (2 * self.A)
        self.betaL = (self.theta - 1) * self.dt / self.A
        self.betaR = self.theta * self.dt / self.A
        self._block_offsets = {'h' : 0, 'Qout' : self.N, 'Qin' : 2 * self.N}
        self.p = self._passthrough_coefficients(passthrough)
        _r, _c = np.divmod(np.arange(self.N), self.cols)
        self._wavefronts = [np.flatnonzero(_r + _c == d)
                            for d in range(self.rows + self.cols - 1)]
        # Build network operators
        self.W = self.routing_matrix()
        self.G = BandedMatrix(-self.W.ab, self.W.l, self.W.u).add_identity(1.0)
        h_nom = np.full(self.N, self.h0)
        dq_nom = self._nominal_derivative(h_nom)
        self.L = self.G.scale_columns(self.betaR * dq_nom).add_identity(1.0)
        self.R = self.G.scale_columns(self.betaL * dq_nom).add_identity(1.0)
        # Constant flux left over by linearizing the valve law about h0
        self._S = self.G.dot(self.outflow(h_nom) - dq_nom * h_nom)
        self._S.flags.writeable = False
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug('Constructed %r\n%s', self, self._format_members())

    @classmethod
    def from_parameters(cls, params):
        """
        Construct a model from a mapping of parameters.

        Inputs:
        -------
        params: dict or pd.Series
            Parameters keyed either by their human-readable names (see
            `PARAMETER_NAMES`, e.g. `Number of Rows`) or by constructor
            argument names. Missing parameters take their default values.
        """
        kwargs = {}
        for key, value in dict(params).items():
            if key in PARAMETER_NAMES:
                kwargs[PARAMETER_NAMES[key]] = value
            elif key in PARAMETER_NAMES.values():
                kwargs[key] = value
            else:
                raise ValueError('Unrecognized parameter {!r}.'.format(key))
        return cls(**kwargs)

    def _passthrough_coefficients(self, passthrough):
        N, rows, cols = self.N, self.rows, self.cols
        if isinstance(passthrough, pd.DataFrame):
            missing = {'r', 'c', 'p'} - set(passthrough.columns)
            if missing:
                raise ValueError('Passthrough table is missing fields: {}.'
                                 .format(', '.join(sorted(missing))))
            r = passthrough['r'].values.astype(int)
            c = passthrough['c'].values.astype(int)
            if ((r < 0) | (r >= rows) | (c < 0) | (c >= cols)).any():
                raise ValueError('Passthrough table references tanks outside the '
                                 '{} x {} grid.'.format(rows, cols))
            p = np.ones(N, dtype=float)
            p[cols * r + c] = passthrough['p'].values.astype(float)
        elif np.ndim(passthrough) == 0:
            p = np.full(N, float(passthrough))
        else:
            p = np.array(passthrough, dtype=float)
            if p.shape == (rows, cols):
                p = p.ravel()
            if p.shape != (N,):
                raise ValueError('Passthrough coefficients must have length {}; got shape {}.'
                                 .format(N, p.shape))
        if not ((p >= 0.) & (p <= 1.)).all():
            raise ValueError('Passthrough coefficients must lie in [0, 1].')
        p.flags.writeable = False
        return p

    def routing_matrix(self):
        """
        Assemble the lower-banded routing matrix W, where (W @ Qout)[k] is the
        flow that tank k receives from its upstream neighbours.
        """
        N, rows, cols = self.N, self.rows, self.cols
        p = self.p
        _c = np.arange(N) % cols
        diagonals = {0 : np.zeros(N)}
        # Tank (r, c - 1) feeds tank (r, c)
        if cols > 1:
            diagonals[-1] = 0.5 * p[:-1] * (_c[1:] > 0)
        # Tank (r - 1, c) feeds tank (r, c)
        if rows > 1:
            diagonals[-cols] = 0.5 * p[:N - cols]
        return BandedMatrix.from_diagonals(N, diagonals)

    def _nominal_derivative(self, h):
        if self.valve_law == 'linear':
            return np.full(self.N, self.coeff1)
        return self.outflow_derivative(h)

    ######################################################################
    # Valve law and routing
    ######################################################################

    def outflow(self, h):
        """
        Valve outflow for levels `h`. Non-positive levels produce zero outflow.
        """
        h = np.asarray(h, dtype=float)
        if self.valve_law == 'sqrt':
            return self.Cv * np.sqrt(np.maximum(self.rho * self.g * h, 0.))
        return self.coeff1 * np.maximum(h, 0.)

    def outflow_derivative(self, h):
        """
        Derivative of the valve outflow with respect to level. Zero for h <= 0.
        """
        h = np.asarray(h, dtype=float)
        dq = np.zeros(h.shape, dtype=float)
        pos = (h > 0)
        if self.valve_law == 'sqrt':
            dq[pos] = self.coeff1 / (2 * np.sqrt(self.rho * self.g * h[pos]))
        else:
            dq[pos] = self.coeff1
        return dq

    def route(self, Qout, z):
        """
        Inflow into each tank: control plus routed outflow of upstream tanks.
        """
        return z + self.W.dot(Qout)

    def level_operator(self, h, beta):
        """
        Banded operator I + beta * G @ diag(dQout/dh) linearized at levels `h`.

        With beta = betaR this is the Jacobian of the residual with respect to
        the new levels; with beta = betaL it is the negated Jacobian with
        respect to the old levels.
        """
        dq = self.outflow_derivative(h)
        return self.G.scale_columns(beta * dq).add_identity(1.0)

    def implicit_level(self, rhs):
        """
        Solve h + betaR * Qout(h) = rhs for h, elementwise, in closed form.
        """
        rhs = np.asarray(rhs, dtype=float)
        h = np.array(rhs)
        pos = (rhs > 0)
        if self.valve_law == 'sqrt':
            # With s = sqrt(h): s**2 + a * s = rhs
            a = self.betaR * self.Cv * np.sqrt(self.rho * self.g)
            s = 2 * rhs[pos] / (a + np.sqrt(a**2 + 4 * rhs[pos]))
            h[pos] = s**2
        else:
            h[pos] = rhs[pos] / (1 + self.betaR * self.coeff1)
        return h

    def _forward_sweep(self, b, z):
        # Tanks on one anti-diagonal depend only on the previous anti-diagonal
        h = np.zeros(self.N, dtype=float)
        Qout = np.zeros(self.N, dtype=float)
        for _ix in self._wavefronts:
            Qin = self.route(Qout, z)
            h[_ix] = self.implicit_level(b[_ix] + self.betaR * Qin[_ix])
            Qout[_ix] = self.outflow(h[_ix])
        return h

    def _flows(self, h, z):
        Qout = self.outflow(h)
        Qin = self.route(Qout, z)
        return Qout, Qin

    def _residual(self, h_old, h_new, z):
        Qout_old, Qin_old = self._flows(h_old, z)
        Qout_new, Qin_new = self._flows(h_new, z)
        return (h_new - h_old
                - self.betaR * (Qin_new - Qout_new)
                + self.betaL * (Qin_old - Qout_old))

    ######################################################################
    # Per-step interface
    ######################################################################

    def compute_flow(self, u, z):
        """
        Given a state u = (h, Qout, Qin) and control z, overwrite Qout and Qin
        from h.

        Inputs:
        -------
        u: np.ndarray (3N)
            State vector; modified in place
        z: np.ndarray (N)
            Control inflow into each tank
        """
        N = self.N
        u = self._check_state(u, 'u', inplace=True)
        z = self._check_control(z, 'z')
        Qout, Qin = self._flows(u[:N], z)
        u[N:2*N] = Qout
        u[2*N:] = Qin
        return u

    def value(self, u_old, u_new, z, out=None):
        """
        Evaluate the residual of one theta-method step:

        c = h_new - h_old - dt/A * (theta * (Qin_new - Qout_new)
                                    + (1 - theta) * (Qin_old - Qout_old))

        Flows at each time level are derived from that level's h block.

        Inputs:
        -------
        u_old: np.ndarray (3N)
            State at the old time level
        u_new: np.ndarray (3N)
            State at the new time level
        z: np.ndarray (N)
            Control inflow into each tank
        out: np.ndarray (N) (optional)
            Array receiving the residual

        Returns:
        --------
        c: np.ndarray (N)
            Residual of the volume balance in each tank
        """
        N = self.N
        u_old = self._check_state(u_old, 'u_old')
        u_new = self._check_state(u_new, 'u_new')
        z = self._check_control(z, 'z')
        c = self._residual(u_old[:N], u_new[:N], z)
        if out is not None:
            out = self._check_control(out, 'out', inplace=True)
            out[:] = c
            return out
        return c

    def linearized_rhs(self, h_old, z):
        """
        Right-hand side R @ h_old + dt/A * (z - S) of the step linearized at the
        nominal level, where S is the constant flux left over by the
        linearization (zero for the linear valve law).
        """
        return self.R.dot(h_old) + (self.dt / self.A) * (z - self._S)

    def solve_level(self, u_old, z, u_new=None, method='exact'):
        """
        Advance the state by one time step.

        With the linear valve law and non-negative levels the step is the
        banded solve L @ h_new = R @ h_old + dt/A * z. Otherwise the new levels
        are found by forward substitution through the lower-triangular network,
        tank by tank in upstream-to-downstream order, solving the valve law
        of each tank in closed form. Either way the step residual vanishes to
        round-off.

        With `method='linearized'` the step is always the single banded solve
        of the operators linearized at the nominal level; for the sqrt law the
        returned residual then measures the linearization error.

        Inputs:
        -------
        u_old: np.ndarray (3N)
            State at the old time level
        z: np.ndarray (N)
            Control inflow into each tank
        u_new: np.ndarray (3N) (optional)
            Array receiving the new state
        method: `exact` or `linearized`
            Solution method

        Returns:
        --------
        u_new: np.ndarray (3N)
            State at the new time level, with flows consistent with levels
        c: np.ndarray (N)
            Residual at the solution
        """
        # Import instance variables
        N = self.N                    # Number of tanks
        L = self.L                    # Implicit operator at nominal level
        betaL = self.betaL            # Explicit blending coefficient
        if method not in ('exact', 'linearized'):
            raise ValueError('Argument `method` must be one of `exact` or `linearized`.')
        u_old = self._check_state(u_old, 'u_old')
        z = self._check_control(z, 'z')
        if u_new is None:
            u_new = np.zeros(3 * N, dtype=float)
        else:
            u_new = self._check_state(u_new, 'u_new', inplace=True)
        h_old = u_old[:N]
        h_new = None
        # Banded solve with operators fixed at construction
        if (method == 'linearized') or ((self.valve_law == 'linear') and (h_old >= 0).all()):
            h_new = L.solve(self.linearized_rhs(h_old, z))
            # Linear law is only linear while no tank is empty
            if (method == 'exact') and not (h_new >= 0).all():
                h_new = None
        if h_new is None:
            Qout_old, Qin_old = self._flows(h_old, z)
            b = h_old - betaL * (Qin_old - Qout_old)
            h_new = self._forward_sweep(b, z)
        c = self._residual(h_old, h_new, z)
        logger.debug('solve_level (%s): max residual %.3e', method, np.abs(c).max())
        # Recompute dependent flows
        Qout, Qin = self._flows(h_new, z)
        u_new[:N] = h_new
        u_new[N:2*N] = Qout
        u_new[2*N:] = Qin
        return u_new, c

    ######################################################################
    # Jacobian-vector products
    ######################################################################

    def _require_state(self, x, name):
        # Nominal operators are exact only for the linear valve law
        if (x is None) and (self.valve_law != 'linear'):
            raise ValueError('Argument `{}` is required to linearize the {!r} valve law.'
                             .format(name, self.valve_law))

    def _old_operator(self, u_old):
        self._require_state(u_old, 'u_old')
        if u_old is None:
            return self.R
        u_old = self._check_state(u_old, 'u_old')
        return self.level_operator(u_old[:self.N], self.betaL)

    def _new_operator(self, u_new):
        self._require_state(u_new, 'u_new')
        if u_new is None:
            return self.L
        u_new = self._check_state(u_new, 'u_new')
        return self.level_operator(u_new[:self.N], self.betaR)

    def apply_jacobian_1_old(self, v_old, u_old=None):
        """
        Apply the derivative of the residual with respect to the old state:
        jv = -R(h_old) @ v_old[h].

        Inputs:
        -------
        v_old: np.ndarray (3N)
            Perturbation of the old state; only the h block contributes
        u_old: np.ndarray (3N) (optional)
            Old state at which to linearize. Required for the sqrt valve law;
            the linear law defaults to the nominal operator (exact for positive
            levels).
        """
        v_old = self._check_state(v_old, 'v_old')
        return -self._old_operator(u_old).dot(v_old[:self.N])

    def apply_jacobian_1_new(self, v_new, u_new=None):
        """
        Apply the derivative of the residual with respect to the new state:
        jv = L(h_new) @ v_new[h].

        Inputs:
        -------
        v_new: np.ndarray (3N)
            Perturbation of the new state; only the h block contributes
        u_new: np.ndarray (3N) (optional)
            New state at which to linearize. Required for the sqrt valve law;
            the linear law defaults to the nominal operator (exact for positive
            levels).
        """
        v_new = self._check_state(v_new, 'v_new')
        return self._new_operator(u_new).dot(v_new[:self.N])

    def apply_jacobian_2(self, v_z):
        """
        Apply the derivative of the residual with respect to the control.
        """
        v_z = self._check_control(v_z, 'v_z')
        return -(self.dt / self.A) * v_z

    def apply_adjoint_jacobian_1_old(self, w, u_old=None):
        """
        Apply the transposed old-state Jacobian to a residual-space vector `w`.
        Returns a state-space vector whose flow blocks are zero.
        """
        N = self.N
        w = self._check_control(w, 'w')
        ajv = np.zeros(3 * N, dtype=float)
        ajv[:N] = -self._old_operator(u_old).rdot(w)
        return ajv

    def apply_adjoint_jacobian_1_new(self, w, u_new=None):
        """
        Apply the transposed new-state Jacobian to a residual-space vector `w`.
        Returns a state-space vector whose flow blocks are zero.
        """
        N = self.N
        w = self._check_control(w, 'w')
        ajv = np.zeros(3 * N, dtype=float)
        ajv[:N] = self._new_operator(u_new).rdot(w)
        return ajv

    def apply_adjoint_jacobian_2(self, w):
        w = self._check_control(w, 'w')
        return -(self.dt / self.A) * w

    def apply_inverse_jacobian_1_new(self, w, u_new=None):
        """
        Solve L(h_new) @ v = w for the level perturbation v.
        """
        w = self._check_control(w, 'w')
        return self._new_operator(u_new).solve(w)

    def apply_inverse_adjoint_jacobian_1_new(self, w, u_new=None):
        """
        Solve L(h_new).T @ v = w for the level perturbation v.
        """
        w = self._check_control(w, 'w')
        return self._new_operator(u_new).T.solve(w)

    ######################################################################
    # State accessors
    ######################################################################

    def index(self, block, r, c):
        """
        Linear index of tank (r, c) within block `h`, `Qout` or `Qin`.
        """
        if block not in self._block_offsets:
            raise KeyError('Unknown state block {!r}; expected one of h, Qout, Qin.'
                           .format(block))
        if not ((0 <= r < self.rows) and (0 <= c < self.cols)):
            raise IndexError('Tank ({}, {}) is outside the {} x {} grid.'
                             .format(r, c, self.rows, self.cols))
        return self._block_offsets[block] + self.cols * r + c

    def h(self, x, r, c):
        return x[self.index('h', r, c)]

    def Qout(self, x, r, c):
        return x[self.index('Qout', r, c)]

    def Qin(self, x, r, c):
        return x[self.index('Qin', r, c)]

    def _block(self, x, block):
        N = self.N
        x = self._check_state(x, 'x', inplace=True)
        offset = self._block_offsets[block]
        return x[offset:offset + N].reshape(self.rows, self.cols)

    def levels(self, x):
        """
        Writable (rows x cols) view of the level block of state `x`.
        """
        return self._block(x, 'h')

    def outflows(self, x):
        """
        Writable (rows x cols) view of the outflow block of state `x`.
        """
        return self._block(x, 'Qout')

    def inflows(self, x):
        """
        Writable (rows x cols) view of the inflow block of state `x`.
        """
        return self._block(x, 'Qin')

    def initial_state(self, z=None):
        """
        State with every tank at the initial level and consistent flows.
        """
        N = self.N
        if z is None:
            z = np.zeros(N, dtype=float)
        u = np.zeros(3 * N, dtype=float)
        u[:N] = self.h0
        return self.compute_flow(u, z)

    @property
    def tank_names(self):
        return ['T_{}_{}'.format(r, c) for r in range(self.rows) for c in range(self.cols)]

    ######################################################################
    # Validation
    ######################################################################

    def _check_state(self, x, name, inplace=False):
        return self._check_vector(x, name, 3 * self.N, inplace)

    def _check_control(self, x, name, inplace=False):
        return self._check_vector(x, name, self.N, inplace)

    def _check_vector(self, x, name, n, inplace):
        if inplace:
            if not isinstance(x, np.ndarray) or not np.issubdtype(x.dtype, np.floating):
                raise TypeError('Argument `{}` must be a floating point np.ndarray to be '
                                'modified in place.'.format(name))
        else:
            x = np.asarray(x, dtype=float)
        if (x.ndim != 1) or (x.size != n):
            raise ValueError('Argument `{}` must be a vector of length {}; got shape {}.'
                             .format(name, n, x.shape))
        return x

    ######################################################################
    # Diagnostics
    ######################################################################

    @property
    def parameters(self):
        """
        Physical and discretization parameters as a pd.Series.
        """
        return pd.Series({
            'rows' : self.rows,
            'cols' : self.cols,
            'Cv' : self.Cv,
            'rho' : self.rho,
            'h0' : self.h0,
            'H' : self.H,
            'A' : self.A,
            'g' : self.g,
            'T' : self.T,
            'theta' : self.theta,
            'Nt' : self.Nt,
            'dt' : self.dt,
            'coeff1' : self.coeff1,
            'kappa' : self.kappa,
            'betaL' : self.betaL,
            'betaR' : self.betaR,
            'valve_law' : self.valve_law
        }, dtype=object)

    def _format_members(self):
        lines = [
            ('Number of rows', self.rows),
            ('Number of columns', self.cols),
            ('Valve constant', self.Cv),
            ('Density of fluid', self.rho),
            ('Initial fluid level', self.h0),
            ('Height of tanks', self.H),
            ('Cross-sectional area of tanks', self.A),
            ('Gravity constant', self.g),
            ('Total time', self.T),
            ('Theta', self.theta),
            ('Number of time steps', self.Nt),
            ('Time step', self.dt),
            ('Valve law', self.valve_law),
            ('coeff1 = Cv*rho*g', self.coeff1),
            ('kappa = Cv*rho*g*dt/(2A)', self.kappa),
            ('betaL = (theta-1)*dt/A', self.betaL),
            ('betaR = theta*dt/A', self.betaR),
            ('Passthrough coefficients', np.array2string(self.p, precision=3)),
        ]
        return ''.join('{:<32}{}\n'.format(key, value) for key, value in lines)

    def print_members(self, file=None):
        """
        Write a human-readable dump of all parameters.

        Inputs:
        -------
        file: file-like (optional)
            Output stream (defaults to sys.stdout)
        """
        if file is None:
            file = sys.stdout
        file.write(self._format_members())

    def __repr__(self):
        return '{}(rows={}, cols={}, theta={}, valve_law={!r})'.format(
            type(self).__name__, self.rows, self.cols, self.theta, self.valve_law)

def _positive_int(name, value):
    if isinstance(value, (bool, np.bool_)):
        raise ValueError('Argument `{}` must be a positive integer; got {!r}.'.format(name, value))
    try:
        ivalue = int(value)
    except (TypeError, ValueError):
        raise ValueError('Argument `{}` must be a positive integer; got {!r}.'
                         .format(name, value)) from None
    if (ivalue != value) or (ivalue < 1):
        raise ValueError('Argument `{}` must be a positive integer; got {!r}.'.format(name, value))
    return ivalue

def _real(name, value, lower=None, upper=None, strict=False):
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValueError('Argument `{}` must be a real number; got {!r}.'
                         .format(name, value)) from None
    if not np.isfinite(value):
        raise ValueError('Argument `{}` must be finite; got {}.'.format(name, value))
    if lower is not None:
        if (value < lower) or (strict and value == lower):
            raise ValueError('Argument `{}` must be {} {}; got {}.'
                             .format(name, '>' if strict else '>=', lower, value))
    if (upper is not None) and (value > upper):
        raise ValueError('Argument `{}` must be <= {}; got {}.'.format(name, upper, value))
    return value
