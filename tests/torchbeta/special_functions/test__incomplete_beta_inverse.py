# tests/torchbeta/special_functions/test__incomplete_beta_inverse.py
import hypothesis
import hypothesis.strategies
import pytest
import scipy.stats
import torch

from torchbeta.special_functions import (
    IncompleteBetaInverseResult,
    IncompleteBetaInverseStatus,
    incomplete_beta,
    incomplete_beta_inverse,
    solve,
)


class TestSolve:
    """Test the scalar interface."""

    @pytest.mark.parametrize("p", [0.0, 0.25, 0.5, 1.0])
    def test_uniform_is_exact(self, p):
        """Beta(1, 1) returns p without iterating."""
        assert solve(1.0, 1.0, p) == (p, True)

    def test_symmetric_median(self):
        x, success = solve(5.0, 5.0, 0.5)

        assert success
        assert abs(x - 0.5) < 1e-8

    def test_power_regime(self):
        """a, b < 1 uses the power approximation."""
        x, success = solve(0.9, 0.9, 0.8)

        assert success
        assert 0.0 < x < 1.0
        residual = incomplete_beta(
            torch.tensor(x, dtype=torch.float64), 0.9, 0.9
        )
        assert abs(float(residual) - 0.8) < 1e-8

    @pytest.mark.parametrize("a,b", [(2.0, 5.0), (0.5, 0.5), (0.1, 50.0)])
    def test_boundaries(self, a, b):
        assert solve(a, b, 0.0) == (0.0, True)
        assert solve(a, b, 1.0) == (1.0, True)

    def test_domain_error(self):
        """Upper-tail power guess below zero is reported, not refined."""
        assert solve(0.1, 50.0, 0.999) == (0.0, False)

    def test_iteration_cap(self):
        """Tolerance met on the final allowed step does not count."""
        x, success = solve(5.0, 5.0, 0.3, maxiter=1)

        assert not success
        assert 0.0 < x < 1.0

    def test_matches_scipy(self):
        x, success = solve(2.0, 5.0, 0.75)

        assert success
        assert abs(x - scipy.stats.beta.ppf(0.75, 2.0, 5.0)) < 1e-9

    def test_returns_python_types(self):
        x, success = solve(3.0, 4.0, 0.2)

        assert isinstance(x, float)
        assert isinstance(success, bool)


class TestIncompleteBetaInverse:
    """Test the batched solver."""

    def test_returns_named_tuple(self):
        p = torch.tensor([0.2, 0.4], dtype=torch.float64)

        result = incomplete_beta_inverse(p, 3.0, 4.0)

        assert isinstance(result, IncompleteBetaInverseResult)
        assert result.x.shape == p.shape
        assert result.converged.dtype == torch.bool
        assert result.status.dtype == torch.int64
        assert result.num_iterations.dtype == torch.int64

    def test_scipy_comparison(self):
        p = torch.linspace(0.01, 0.99, 99, dtype=torch.float64)

        result = incomplete_beta_inverse(p, 2.0, 5.0)

        assert result.converged.all()
        expected = torch.tensor(
            scipy.stats.beta.ppf(p.numpy(), 2.0, 5.0), dtype=torch.float64
        )
        torch.testing.assert_close(result.x, expected, rtol=1e-7, atol=1e-9)

    def test_status_codes(self):
        p = torch.tensor([0.0, 0.999, 0.3], dtype=torch.float64)

        result = incomplete_beta_inverse(p, 0.1, 50.0, maxiter=1)

        assert result.status.tolist() == [
            IncompleteBetaInverseStatus.CONVERGED,
            IncompleteBetaInverseStatus.DOMAIN_ERROR,
            IncompleteBetaInverseStatus.CONVERGENCE_FAILURE,
        ]
        assert result.converged.tolist() == [True, False, False]
        assert result.num_iterations.tolist() == [0, 0, 1]
        assert result.x[1] == 0.0

    def test_iteration_count_bounded(self):
        p = torch.linspace(0.05, 0.95, 19, dtype=torch.float64)

        for maxiter in [1, 2, 5]:
            result = incomplete_beta_inverse(p, 3.0, 0.7, maxiter=maxiter)
            assert (result.num_iterations <= maxiter).all()

    def test_exact_cases_do_not_iterate(self):
        p = torch.tensor([0.0, 0.3, 1.0], dtype=torch.float64)
        a = torch.tensor([2.0, 1.0, 0.5], dtype=torch.float64)
        b = torch.tensor([3.0, 1.0, 0.5], dtype=torch.float64)

        result = incomplete_beta_inverse(p, a, b)

        assert result.x.tolist() == [0.0, 0.3, 1.0]
        assert result.converged.all()
        assert (result.num_iterations == 0).all()

    def test_monotonic_in_p(self):
        p = torch.linspace(0.01, 0.99, 50, dtype=torch.float64)

        result = incomplete_beta_inverse(p, 2.0, 5.0)

        assert result.converged.all()
        assert (result.x[1:] > result.x[:-1]).all()

    def test_round_trip(self):
        """I_x(a, b) reproduces p wherever the solver succeeds."""
        values = torch.tensor([0.5, 0.9, 2.0, 5.0, 20.0], dtype=torch.float64)
        a, b, p = torch.meshgrid(
            values,
            values,
            torch.tensor([0.01, 0.1, 0.5, 0.9, 0.99], dtype=torch.float64),
            indexing="ij",
        )

        result = incomplete_beta_inverse(p, a, b)

        ok = result.converged
        assert ok.any()
        assert ((result.x[ok] >= 0) & (result.x[ok] <= 1)).all()
        torch.testing.assert_close(
            incomplete_beta(result.x[ok], a[ok], b[ok]),
            p[ok],
            rtol=0,
            atol=1e-7,
        )

    def test_resolve_reproduces_solution(self):
        """Solving again for I_x(a, b) returns x."""
        values = torch.tensor([0.1, 0.5, 2.0, 10.0, 50.0], dtype=torch.float64)
        a, b, p = torch.meshgrid(
            values,
            values,
            torch.tensor([0.001, 0.1, 0.5, 0.9, 0.999], dtype=torch.float64),
            indexing="ij",
        )

        first = incomplete_beta_inverse(p, a, b)
        second = incomplete_beta_inverse(
            incomplete_beta(first.x, a, b), a, b
        )

        ok = first.converged & second.converged
        assert ok.any()
        torch.testing.assert_close(
            second.x[ok], first.x[ok], rtol=0, atol=1e-6
        )

    def test_batched_matches_scalar(self):
        p = torch.tensor([0.05, 0.3, 0.7], dtype=torch.float64)
        a = torch.tensor([2.0, 0.5, 8.0], dtype=torch.float64)
        b = torch.tensor([3.0, 4.0, 1.5], dtype=torch.float64)

        result = incomplete_beta_inverse(p, a, b)

        for i in range(3):
            x, success = solve(float(a[i]), float(b[i]), float(p[i]))
            assert bool(result.converged[i]) == success
            assert abs(float(result.x[i]) - x) < 1e-12

    def test_broadcasting(self):
        p = torch.tensor([[0.1], [0.5], [0.9]], dtype=torch.float64)
        a = torch.tensor([1.5, 2.0, 3.0, 4.0], dtype=torch.float64)

        result = incomplete_beta_inverse(p, a, 2.0)

        assert result.x.shape == (3, 4)
        assert result.status.shape == (3, 4)

    def test_empty(self):
        result = incomplete_beta_inverse(
            torch.empty(0, dtype=torch.float64), 2.0, 3.0
        )

        assert result.x.shape == (0,)
        assert result.converged.shape == (0,)

    def test_float32(self):
        p = torch.linspace(0.1, 0.9, 9, dtype=torch.float32)

        result = incomplete_beta_inverse(p, 2.0, 5.0)

        assert result.x.dtype == torch.float32
        assert result.converged.all()
        expected = torch.tensor(
            scipy.stats.beta.ppf(p.double().numpy(), 2.0, 5.0),
            dtype=torch.float32,
        )
        torch.testing.assert_close(result.x, expected, rtol=1e-4, atol=1e-5)

    def test_detaches_inputs(self):
        p = torch.tensor([0.3], dtype=torch.float64, requires_grad=True)

        result = incomplete_beta_inverse(p, 2.0, 3.0)

        assert not result.x.requires_grad

    def test_type_error(self):
        with pytest.raises(TypeError):
            incomplete_beta_inverse(0.5, 2.0, 3.0)


@hypothesis.settings(max_examples=50, deadline=None)
@hypothesis.given(
    a=hypothesis.strategies.floats(min_value=0.5, max_value=20.0),
    b=hypothesis.strategies.floats(min_value=0.5, max_value=20.0),
    p=hypothesis.strategies.floats(min_value=0.01, max_value=0.99),
)
def test_successful_solutions_invert(a, b, p):
    x, success = solve(a, b, p)

    hypothesis.assume(success)
    assert 0.0 <= x <= 1.0
    residual = incomplete_beta(torch.tensor(x, dtype=torch.float64), a, b)
    assert abs(float(residual) - p) < 1e-6
