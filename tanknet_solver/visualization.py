import numpy as np
import matplotlib.pyplot as plt

def plot_levels(model, u, ax=None, cmap='Blues', vmin=0., vmax=None, show_flows=True,
                colorbar=True, imshow_kwargs={}, quiver_kwargs={}):
    """
    Plot tank levels on the grid, with arrows showing routed outflows.

    Inputs:
    -------
    model : tanknet_solver.tankstate.TankState instance
        Tank network model
    u : np.ndarray (3N)
        State to plot
    ax : matplotlib.axes.Axes (optional)
        Axes to draw on
    cmap : str
        Colormap for levels
    vmin, vmax : float
        Color limits for levels (vmax defaults to tank height)
    show_flows : bool
        If True, draw arrows proportional to flow routed right and down
    """
    if ax is None:
        fig, ax = plt.subplots()
    u = np.asarray(u, dtype=float)
    rows, cols = model.rows, model.cols
    if vmax is None:
        vmax = model.H
    h = model.levels(u)
    im = ax.imshow(h, cmap=cmap, vmin=vmin, vmax=vmax, origin='upper', **imshow_kwargs)
    if colorbar:
        ax.figure.colorbar(im, ax=ax, label='Level')
    if show_flows:
        # Half of the passed outflow goes to each downstream neighbour
        share = 0.5 * model.p.reshape(rows, cols) * model.outflows(u)
        max_share = share.max()
        if max_share > 0:
            length = 0.45 * share / max_share
            r, c = np.mgrid[0:rows, 0:cols]
            zero = np.zeros_like(length)
            kwargs = dict(angles='xy', scale_units='xy', scale=1, color='0.2')
            kwargs.update(quiver_kwargs)
            ax.quiver(c, r, length, zero, **kwargs)
            ax.quiver(c, r, zero, length, **kwargs)
    ax.set_xticks(np.arange(cols))
    ax.set_yticks(np.arange(rows))
    ax.set_xlabel('Column')
    ax.set_ylabel('Row')
    return ax

def plot_states(states, ax=None, variable='h', **kwargs):
    """
    Plot recorded trajectories of one state variable.

    Inputs:
    -------
    states : tanknet_solver.simulation.States instance
        Recorded states of a finished simulation
    ax : matplotlib.axes.Axes (optional)
        Axes to draw on
    variable : `h`, `Qout` or `Qin`
        State variable to plot
    kwargs : **dict
        Keyword arguments passed to pd.DataFrame.plot
    """
    if ax is None:
        fig, ax = plt.subplots()
    df = getattr(states, variable)
    df.plot(ax=ax, **kwargs)
    ax.set_xlabel('Time')
    ax.set_ylabel(variable)
    return ax
