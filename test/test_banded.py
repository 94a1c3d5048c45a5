import numpy as np
import pytest
from tanknet_solver.banded import BandedMatrix

rng = np.random.default_rng(42)

n = 12
l, u = 3, 2
dense = np.zeros((n, n))
for k in range(-l, u + 1):
    dense += np.diag(rng.uniform(-1, 1, n - abs(k)), k=k)
dense += 10 * np.eye(n)
banded = BandedMatrix.from_dense(dense, l, u)

def test_banded_todense():
    assert banded.shape == (n, n)
    assert np.allclose(banded.todense(), dense)
    for k in range(-l, u + 1):
        assert np.allclose(banded.diagonal(k), np.diag(dense, k=k))
    assert not banded.diagonal(u + 1).any()

def test_banded_storage_layout():
    # LAPACK diagonal-ordered form: ab[u + i - j, j] == A[i, j]
    for i in range(n):
        for j in range(max(0, i - l), min(n, i + u + 1)):
            assert banded.ab[u + i - j, j] == dense[i, j]

def test_banded_dot():
    x = rng.normal(size=n)
    assert np.allclose(banded.dot(x), dense @ x)
    assert np.allclose(banded.rdot(x), dense.T @ x)
    assert np.allclose(banded.T.dot(x), dense.T @ x)
    assert (banded.T.l, banded.T.u) == (u, l)

def test_banded_solve():
    b = rng.normal(size=n)
    x = banded.solve(b)
    assert np.allclose(x, np.linalg.solve(dense, b), rtol=1e-10, atol=1e-12)
    assert np.allclose(banded.T.solve(b), np.linalg.solve(dense.T, b), rtol=1e-10, atol=1e-12)

def test_lower_banded_solve():
    lower = np.tril(dense) - np.tril(dense, k=-4)
    L = BandedMatrix.from_dense(lower, 3, 0)
    b = rng.normal(size=n)
    assert np.allclose(L.solve(b), np.linalg.solve(lower, b), rtol=1e-10, atol=1e-12)

def test_diagonal_solve():
    D = BandedMatrix.from_diagonals(1, {0 : 4.0})
    assert np.allclose(D.solve(np.array([2.0])), [0.5])
    D = BandedMatrix.from_diagonals(5, {0 : np.arange(1., 6.)})
    assert np.allclose(D.solve(np.ones(5)), 1 / np.arange(1., 6.))

def test_scale_columns_and_identity():
    d = rng.uniform(0.5, 2.0, n)
    scaled = banded.scale_columns(d).add_identity(3.0)
    assert np.allclose(scaled.todense(), dense @ np.diag(d) + 3.0 * np.eye(n))

def test_banded_is_read_only():
    with pytest.raises(ValueError):
        banded.ab[0, 0] = 1.0
    # Derived matrices leave the original untouched
    before = banded.todense()
    banded.add_identity(5.0)
    assert np.array_equal(banded.todense(), before)

def test_singular_band_raises():
    L = BandedMatrix.from_diagonals(4, {0 : [1., 0., 1., 1.], -1 : [1., 1., 1.]})
    with pytest.raises(np.linalg.LinAlgError):
        L.solve(np.ones(4))
    A = BandedMatrix.from_diagonals(3, {0 : 0., 1 : 0., -1 : 0.})
    with pytest.raises(np.linalg.LinAlgError):
        A.solve(np.ones(3))

def test_shape_mismatch_raises():
    with pytest.raises(ValueError):
        banded.dot(np.ones(n + 1))
    with pytest.raises(ValueError):
        banded.solve(np.ones((n, 1)))
    with pytest.raises(ValueError):
        BandedMatrix(np.zeros((3, 4)), 1, 2)
    with pytest.raises(ValueError):
        BandedMatrix.from_diagonals(3, {5 : 1.0})
