# tests/torchbeta/special_functions/test__log_beta.py
import math

import pytest
import scipy.special
import torch

from torchbeta.special_functions import log_beta


class TestLogBeta:
    """Tests for the log beta function."""

    def test_known_value(self):
        """B(2, 3) = 1/12."""
        result = log_beta(
            torch.tensor(2.0, dtype=torch.float64),
            torch.tensor(3.0, dtype=torch.float64),
        )
        assert result.item() == pytest.approx(-math.log(12.0), rel=1e-12)

    def test_symmetric(self):
        a = torch.tensor([0.3, 2.5, 40.0], dtype=torch.float64)
        b = torch.tensor([7.0, 0.9, 1.5], dtype=torch.float64)
        torch.testing.assert_close(log_beta(a, b), log_beta(b, a))

    def test_scipy_comparison(self):
        """Compare against scipy.special.betaln."""
        a = torch.tensor([0.1, 0.5, 1.0, 2.0, 50.0], dtype=torch.float64)
        b = torch.tensor([50.0, 0.5, 1.0, 5.0, 0.1], dtype=torch.float64)

        expected = torch.tensor(
            scipy.special.betaln(a.numpy(), b.numpy()), dtype=torch.float64
        )
        torch.testing.assert_close(log_beta(a, b), expected, rtol=1e-10, atol=1e-12)

    def test_broadcasting(self):
        a = torch.tensor([[1.0], [2.0]], dtype=torch.float64)
        b = torch.tensor([1.0, 2.0, 3.0], dtype=torch.float64)
        assert log_beta(a, b).shape == (2, 3)
