import io
import numpy as np
import pandas as pd
import pytest
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from tanknet_solver.tankstate import TankState
from tanknet_solver.ntankstate import nTankState
from tanknet_solver.simulation import Simulation
from tanknet_solver.visualization import plot_levels, plot_states

rows, cols = 2, 3
N = rows * cols
model = TankState(rows=rows, cols=cols, Cv=0.5, h0=1.0, H=10.0, T=2.0, Nt=20,
                  theta=0.5, passthrough=0.9)
nmodel = nTankState(rows=rows, cols=cols, Cv=0.5, h0=1.0, H=10.0, T=2.0, Nt=20,
                    theta=0.5, passthrough=0.9)

Q_in = pd.DataFrame(np.zeros((3, N)), index=[0.0, 1.0, 2.0])
Q_in.iloc[:, 0] = [0.0, 2.0, 0.0]

def run(model, **kwargs):
    with Simulation(model, Q_in=Q_in, **kwargs) as simulation:
        while simulation.t < simulation.t_end - 1e-9:
            simulation.step()
            simulation.record_state()
            assert np.abs(simulation.residual).max() < 1e-10
    return simulation

def test_simulation_records():
    simulation = run(model)
    for variable in ('h', 'Qout', 'Qin'):
        df = getattr(simulation.states, variable)
        assert isinstance(df, pd.DataFrame)
        assert df.shape == (model.Nt + 1, N)
        assert list(df.columns) == model.tank_names
    assert np.isclose(simulation.t, 2.0)
    assert np.allclose(simulation.states.h.iloc[0].values, model.h0)
    assert np.isclose(simulation.states.h.index[-1], 2.0)
    assert 'h' in repr(simulation.states)

def test_simulation_numba_agreement():
    a = run(model)
    b = run(nmodel)
    assert np.allclose(a.states.h.values, b.states.h.values, rtol=1e-12, atol=1e-14)

def test_simulation_control():
    simulation = Simulation(model, Q_in=Q_in)
    assert np.allclose(simulation.control(0.5)[0], 1.0)
    assert np.allclose(simulation.control(0.5)[1:], 0.0)
    # Constant extrapolation outside the schedule
    assert np.allclose(simulation.control(5.0), Q_in.iloc[-1].values)
    simulation = Simulation(model, Q_in=Q_in, interpolation_method='nearest')
    assert np.allclose(simulation.control(0.8)[0], 2.0)
    simulation = Simulation(model)
    assert not simulation.control(1.0).any()
    with pytest.raises(ValueError):
        Simulation(model, Q_in=Q_in.iloc[:, :2])
    with pytest.raises(ValueError):
        Simulation(model, interpolation_method='cubic')

def test_simulation_explicit_control():
    simulation = Simulation(model)
    z = np.full(N, 0.25)
    simulation.step(Q_in=z)
    u_new, _ = model.solve_level(model.initial_state(), z)
    assert np.allclose(simulation.u, u_new)

def test_simulation_linearized():
    simulation = Simulation(model, solver_kwargs={'method' : 'linearized'})
    simulation.step()
    assert np.abs(simulation.residual).max() > 0

def test_simulation_load_state():
    simulation = Simulation(model)
    u = model.initial_state()
    model.levels(u)[:] = 2.0
    simulation.load_state(u)
    model.levels(u)[:] = 3.0
    assert np.allclose(simulation.u[:N], 2.0)
    with pytest.raises(ValueError):
        simulation.load_state(u[:N])

def test_overflow_warning():
    small = TankState(rows=1, cols=2, Cv=0.1, h0=1.0, H=1.05, T=1.0, Nt=5)
    simulation = Simulation(small)
    with pytest.warns(RuntimeWarning):
        for _ in range(small.Nt):
            simulation.step(Q_in=np.full(small.N, 5.0))

def test_schedule_sampling():
    pair = TankState(rows=1, cols=2)
    # Unsorted integer times are sorted and converted to float
    schedule = pd.DataFrame([[4., 40.], [0., 10.], [1., 20.]], index=[2, 0, 1])
    simulation = Simulation(pair, Q_in=schedule)
    assert simulation.t_start == 0.
    assert np.allclose(simulation.control(0.5), [0.5, 15.])
    assert np.allclose(simulation.control(1.0), [1., 20.])
    assert np.allclose(simulation.control(-1.), [0., 10.])
    assert np.allclose(simulation.control(3.5), [4., 40.])
    simulation = Simulation(pair, Q_in=schedule, interpolation_method='Nearest')
    assert np.allclose(simulation.control(1.75), [4., 40.])
    assert np.allclose(simulation.control(0.2), [0., 10.])
    # The caller's schedule is left untouched
    assert list(schedule.index) == [2, 0, 1]
    with pytest.raises(ValueError):
        Simulation(pair, Q_in=pd.DataFrame(np.zeros((2, 2)), index=[1., 1.]))

def test_states_trajectories():
    simulation = run(model)
    states = simulation.states
    trajectory = states.tank(1, 2)
    assert list(trajectory.columns) == ['h', 'Qout', 'Qin']
    assert np.allclose(trajectory['h'].values, states.h['T_1_2'].values)
    assert np.allclose(trajectory['Qin'].values, states.Qin.iloc[:, N - 1].values)
    volume = states.volume()
    assert len(volume) == model.Nt + 1
    assert np.isclose(volume.iloc[0], model.A * N * model.h0)
    assert np.allclose(volume.values, model.A * states.h.sum(axis=1).values)
    with pytest.raises(IndexError):
        states.tank(rows, 0)

def test_states_before_finalize():
    simulation = Simulation(model)
    simulation.step()
    simulation.record_state()
    states = simulation.states
    assert isinstance(states.h, dict)
    assert len(states.volume()) == 2
    assert states.tank(0, 0).shape == (2, 3)
    assert '2 records' in repr(states)

def test_print_progress():
    simulation = Simulation(model)
    stream = io.StringIO()
    simulation.print_progress(file=stream)
    assert '0.0%' in stream.getvalue()
    # Output is refreshed only when the whole percent changes
    simulation.print_progress(file=stream)
    assert stream.getvalue().count('\r') == 1
    for _ in range(model.Nt):
        simulation.step()
        simulation.print_progress(file=stream)
    assert stream.getvalue().endswith('s]')
    assert '100.0%' in stream.getvalue()
    assert stream.getvalue().count('\r') == model.Nt + 1

def test_visualization():
    simulation = run(model)
    ax = plot_levels(model, simulation.u)
    assert len(ax.images) == 1
    ax = plot_states(simulation.states, variable='Qout')
    assert len(ax.get_lines()) == N
    plt.close('all')
