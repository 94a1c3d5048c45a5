import numpy as np
import scipy.linalg

class BandedMatrix():
    """
    Square matrix stored by its band of nonzero diagonals.

    Storage follows the LAPACK diagonal-ordered form used by
    `scipy.linalg.solve_banded`:

        ab[u + i - j, j] == A[i, j]

    Inputs:
    -------
    ab: np.ndarray ((l + u + 1) x n)
        Diagonal-ordered band storage
    l: int
        Number of nonzero lower diagonals
    u: int
        Number of nonzero upper diagonals

    Methods:
    --------
    dot : Compute matrix-vector product A @ x
    rdot : Compute transposed matrix-vector product A.T @ x
    solve : Solve A @ x = b
    diagonal : Return the k-th diagonal
    todense : Return dense representation

    Attributes:
    -----------
    n : int
        Dimension of the matrix
    ab : np.ndarray
        Read-only band storage
    """
    def __init__(self, ab, l, u):
        ab = np.array(ab, dtype=float, ndmin=2)
        l = int(l)
        u = int(u)
        if (l < 0) or (u < 0):
            raise ValueError('Bandwidths must be non-negative; got l={}, u={}.'.format(l, u))
        if ab.ndim != 2:
            raise ValueError('Band storage must be two-dimensional.')
        if ab.shape[0] != l + u + 1:
            raise ValueError('Band storage has {} rows; expected l + u + 1 = {}.'
                             .format(ab.shape[0], l + u + 1))
        n = ab.shape[1]
        if n < 1:
            raise ValueError('Banded matrix must have at least one column.')
        if max(l, u) > n - 1:
            raise ValueError('Bandwidth ({}, {}) exceeds matrix dimension {}.'.format(l, u, n))
        ab.flags.writeable = False
        self.ab = ab
        self.l = l
        self.u = u
        self.n = n

    @classmethod
    def from_diagonals(cls, n, diagonals):
        """
        Construct a banded matrix from a dict of diagonals.

        Inputs:
        -------
        n: int
            Dimension of the matrix
        diagonals: dict {int : np.ndarray or float}
            Mapping from diagonal offset k (A[i, i + k]) to the values along
            that diagonal (length n - |k|) or a scalar fill value.
        """
        offsets = [int(k) for k in diagonals]
        l = max([-k for k in offsets] + [0])
        u = max([k for k in offsets] + [0])
        ab = np.zeros((l + u + 1, n), dtype=float)
        for k, values in diagonals.items():
            k = int(k)
            m = n - abs(k)
            if m <= 0:
                raise ValueError('Diagonal offset {} out of range for dimension {}.'.format(k, n))
            values = np.broadcast_to(np.asarray(values, dtype=float), (m,))
            if k >= 0:
                ab[u - k, k:] = values
            else:
                ab[u - k, :m] = values
        return cls(ab, l, u)

    @classmethod
    def from_dense(cls, A, l, u):
        """
        Extract the band (l, u) of a dense square matrix.
        """
        A = np.asarray(A, dtype=float)
        if (A.ndim != 2) or (A.shape[0] != A.shape[1]):
            raise ValueError('Dense matrix must be square; got shape {}.'.format(A.shape))
        n = A.shape[0]
        diagonals = {k : np.diag(A, k=k) for k in range(-l, u + 1)}
        return cls.from_diagonals(n, diagonals)

    @property
    def shape(self):
        return (self.n, self.n)

    @property
    def T(self):
        """
        Transposed banded matrix.
        """
        diagonals = {-k : self.diagonal(k) for k in range(-self.l, self.u + 1)}
        return self.from_diagonals(self.n, diagonals)

    def diagonal(self, k=0):
        """
        Return diagonal k of the matrix (entries A[i, i + k]).
        """
        l, u, n = self.l, self.u, self.n
        if (k < -l) or (k > u):
            return np.zeros(max(n - abs(k), 0))
        if k >= 0:
            return self.ab[u - k, k:].copy()
        else:
            return self.ab[u - k, :n + k].copy()

    def _check_vector(self, x, name='x'):
        x = np.asarray(x, dtype=float)
        if (x.ndim != 1) or (x.size != self.n):
            raise ValueError('Argument `{}` must be a vector of length {}; got shape {}.'
                             .format(name, self.n, x.shape))
        return x

    def dot(self, x):
        """
        Compute A @ x using only band entries.

        Inputs:
        -------
        x: np.ndarray (n)
            Vector to multiply
        """
        x = self._check_vector(x)
        ab, l, u, n = self.ab, self.l, self.u, self.n
        y = np.zeros(n, dtype=float)
        for k in range(-l, u + 1):
            m = n - abs(k)
            if k >= 0:
                y[:m] += ab[u - k, k:] * x[k:]
            else:
                y[-k:] += ab[u - k, :m] * x[:m]
        return y

    def rdot(self, x):
        """
        Compute A.T @ x using only band entries.
        """
        x = self._check_vector(x)
        ab, l, u, n = self.ab, self.l, self.u, self.n
        y = np.zeros(n, dtype=float)
        for k in range(-l, u + 1):
            m = n - abs(k)
            if k >= 0:
                y[k:] += ab[u - k, k:] * x[:m]
            else:
                y[:m] += ab[u - k, :m] * x[-k:]
        return y

    def scale_columns(self, d):
        """
        Return A @ diag(d) as a new banded matrix with the same band.
        """
        d = self._check_vector(d, name='d')
        return BandedMatrix(self.ab * d[np.newaxis, :], self.l, self.u)

    def add_identity(self, alpha=1.0):
        """
        Return A + alpha * I as a new banded matrix with the same band.
        """
        ab = np.array(self.ab)
        ab[self.u] += alpha
        return BandedMatrix(ab, self.l, self.u)

    def solve(self, b):
        """
        Solve A @ x = b for x.

        Inputs:
        -------
        b: np.ndarray (n)
            Right-hand side vector

        Raises:
        -------
        np.linalg.LinAlgError
            If the matrix is singular or the solution is not finite.
        """
        b = self._check_vector(b, name='b')
        ab, l, u = self.ab, self.l, self.u
        diag = ab[u]
        # Triangular bands are singular exactly when a diagonal entry vanishes
        if ((l == 0) or (u == 0)) and not np.all(diag):
            raise np.linalg.LinAlgError('Singular banded matrix: zero on main diagonal at index {}.'
                                        .format(int(np.flatnonzero(diag == 0)[0])))
        if (l == 0) and (u == 0):
            x = b / diag
        else:
            x = scipy.linalg.solve_banded((l, u), ab, b, check_finite=False)
        if not np.isfinite(x).all():
            raise np.linalg.LinAlgError('Banded solve produced a non-finite solution.')
        return x

    def todense(self):
        """
        Return the dense (n x n) representation of the matrix.
        """
        A = np.zeros((self.n, self.n), dtype=float)
        for k in range(-self.l, self.u + 1):
            A += np.diag(self.diagonal(k), k=k)
        return A

    def __repr__(self):
        return 'BandedMatrix(n={}, l={}, u={})'.format(self.n, self.l, self.u)
