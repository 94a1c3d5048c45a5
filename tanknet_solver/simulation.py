import time
import sys
import logging
import warnings
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

class Simulation():
    """
    Class for managing and executing forward simulations of a tank network.

    Inputs:
    -------
    model : tanknet_solver.tankstate.TankState instance
        Tank network model to simulate
    Q_in : pd.DataFrame (T x N)
        Control inflow into each tank (m^3/s), indexed by time
    u_0 : np.ndarray (3N)
        Initial state (defaults to `model.initial_state`)
    t_start : float
        Simulation start time (defaults to start of `Q_in`, or 0)
    t_end : float
        Simulation end time (defaults to t_start + Nt * dt of the model)
    interpolation_method : `linear` or `nearest`
        Interpolation method to use for sampling control inputs
    solver_kwargs : dict
        Keyword arguments passed to `model.solve_level`

    Methods:
    --------
    step : Advance model forward in time
    control : Sample the control inflow at a given time
    record_state : Record current simulation state
    load_state : Load a state into the simulation
    print_progress : Print progress bar

    Attributes:
    -----------
    states : tanknet_solver.simulation.States instance
        Recorded trajectories of levels (h), outflows (Qout) and inflows (Qin)
    t : float
        Current simulation time
    u : np.ndarray (3N)
        Current state
    residual : np.ndarray (N)
        Residual of the most recent step
    """
    def __init__(self, model, Q_in=None, u_0=None, t_start=None, t_end=None,
                 interpolation_method='linear', solver_kwargs={}):
        self.model = model
        if Q_in is not None:
            if Q_in.shape[1] != model.N:
                raise ValueError('Argument `Q_in` must have {} columns (one per tank); got {}.'
                                 .format(model.N, Q_in.shape[1]))
            Q_in = Q_in.astype(float)
            Q_in.index = Q_in.index.astype(float)
            if not Q_in.index.is_unique:
                raise ValueError('Argument `Q_in` must have unique time indices.')
            Q_in = Q_in.sort_index()
        self.Q_in = Q_in
        interpolation_method = interpolation_method.lower()
        if interpolation_method not in ('linear', 'nearest'):
            raise ValueError('Argument `interpolation_method` must be one of `linear` or `nearest`.')
        self.interpolation_method = interpolation_method
        self.solver_kwargs = dict(solver_kwargs)
        self.dt = model.dt
        if t_start is None:
            if self.Q_in is not None:
                t_start = float(self.Q_in.index.min())
            else:
                t_start = 0.
        self.t_start = t_start
        if t_end is None:
            t_end = self.t_start + model.Nt * self.dt
        self.t_end = t_end
        if u_0 is None:
            u_0 = model.initial_state(self.control(self.t_start))
        self.u = np.array(model._check_state(u_0, 'u_0'))
        self.residual = np.zeros(model.N)
        self._iter_count = 0
        self._clock_start_time = time.time()
        self._last_percent = None
        self.states = States(model)
        self.record_state()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        self.states.finalize()

    @property
    def t(self):
        return self.t_start + self._iter_count * self.dt

    def control(self, t):
        """
        Sample the control inflow at time `t`; zero when no schedule is given.
        Times outside the schedule take the nearest end value.
        """
        if self.Q_in is None:
            return np.zeros(self.model.N)
        Q_in = self.Q_in
        if self.interpolation_method == 'nearest':
            ix = Q_in.index.get_indexer([t], method='nearest')[0]
            return Q_in.iloc[ix].values.astype(float)
        sampled = (Q_in.reindex(Q_in.index.union([t]))
                   .interpolate(method='index', limit_direction='both'))
        return sampled.loc[t].values.astype(float)

    def load_state(self, u):
        """
        Load simulation state

        Inputs:
        -------
        u : np.ndarray (3N)
            State vector
        """
        self.u = np.array(self.model._check_state(u, 'u'))

    def record_state(self):
        """
        Save current levels, outflows and inflows keyed by simulation time.
        """
        self.states.record(float(self.t), self.u)

    def step(self, Q_in=None):
        """
        Advance model forward by one time step.

        Inputs:
        -------
        Q_in : np.ndarray (N) (optional)
            Control inflow for this step; sampled from the schedule if omitted
        """
        if (self._iter_count == 0):
            self._clock_start_time = time.time()
        model = self.model
        t_next = self.t + self.dt
        if Q_in is None:
            z = self.control(t_next)
        else:
            z = np.asarray(Q_in, dtype=float)
        u_next, c = model.solve_level(self.u, z, **self.solver_kwargs)
        self.u = u_next
        self.residual = c
        self._iter_count += 1
        h = u_next[:model.N]
        if (h > model.H).any():
            warnings.warn('Tank level exceeds tank height H={} at t={} in tanks {}.'
                          .format(model.H, self.t, np.flatnonzero(h > model.H).tolist()),
                          RuntimeWarning)
        logger.debug('Simulation step %d at t=%s, total level %.6g',
                     self._iter_count, self.t, h.sum())

    def print_progress(self, file=None):
        """
        Write a progress bar, refreshed once per whole percent of the run.

        Inputs:
        -------
        file : file-like (optional)
            Output stream (defaults to sys.stdout)
        """
        if file is None:
            file = sys.stdout
        span = self.t_end - self.t_start
        if span > 0:
            fraction = min(max((self.t - self.t_start) / span, 0.), 1.)
        else:
            fraction = 1.
        percent = int(100 * fraction)
        if percent == self._last_percent:
            return
        self._last_percent = percent
        width = 50
        filled = int(round(width * fraction))
        elapsed = time.time() - self._clock_start_time
        file.write('\r[{}{}] {:5.1f}% [{:.2f} s]'.format('#' * filled, '.' * (width - filled),
                                                        100 * fraction, elapsed))
        file.flush()

class States():
    """
    Recorded trajectories of a tank network, one entry per recorded time.

    While a simulation runs, `h`, `Qout` and `Qin` are dicts mapping time to
    the flat (N) block of the state. `finalize` turns each into a pd.DataFrame
    (time x tank) with columns named after the tanks (`T_{r}_{c}`).
    """
    blocks = ('h', 'Qout', 'Qin')

    def __init__(self, model):
        self._model = model
        self._block_views = {'h' : model.levels,
                             'Qout' : model.outflows,
                             'Qin' : model.inflows}
        for block in self.blocks:
            setattr(self, block, {})

    def record(self, t, u):
        for block in self.blocks:
            getattr(self, block)[t] = self._block_views[block](u).ravel().copy()

    def _frame(self, block):
        records = getattr(self, block)
        if isinstance(records, pd.DataFrame):
            return records
        return pd.DataFrame.from_dict(records, orient='index',
                                      columns=self._model.tank_names)

    def finalize(self):
        for block in self.blocks:
            setattr(self, block, self._frame(block))

    def tank(self, r, c):
        """
        Trajectory of a single tank (r, c) with columns h, Qout and Qin.
        """
        k = self._model.index('h', r, c)
        return pd.DataFrame({block : self._frame(block).iloc[:, k]
                             for block in self.blocks})

    def volume(self):
        """
        Total fluid volume stored in the network at each recorded time.
        """
        return self._model.A * self._frame('h').sum(axis=1)

    def __repr__(self):
        return 'States({}; {} records)'.format(', '.join(self.blocks), len(self.h))
