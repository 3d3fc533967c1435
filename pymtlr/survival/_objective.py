"""
Regularized MTLR negative log-likelihood and its analytic gradient.

With x~ = [1, x] and weights W of shape (p+1, m), the per-column linear
predictors are f_c = x~ . W[:, c]. The score of transition index k is the
cumulative sum of the first k predictors,

    s_k = f_0 + ... + f_{k-1},        s_0 = 0,

so P(transition = k | x) = exp(s_k) / sum_j exp(s_j). A subject whose
observation is consistent with the transition range [lo, hi] contributes

    log L = logsumexp(s_lo..s_hi) - logsumexp(s_0..s_m).

The objective adds two penalties on the feature rows (the bias row is
never penalized):

    J(W) = -sum_i log L_i
           + 1 / (2 C1) * sum_c ||W[1:, c]||^2
           + C2 / 2     * sum_{c>=1} ||W[1:, c] - W[1:, c-1]||^2

Small C1 shrinks every feature weight toward zero; C2 couples adjacent
time columns. The first and last columns have one neighbour in the
smoothness term, interior columns two.

Gradient: d(-log L_i)/d f_c = S_model(tau_{c+1}) - S_posterior(tau_{c+1}),
the model survival minus the survival implied by the observation, both
at the boundary after column c.

References:
    Yu, C.-N., Greiner, R., Lin, H.-C. & Baracos, V. (2011). Learning
        patient-specific cancer survival distributions as a sequence of
        dependent regressors. NIPS 24, 1845-1853.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy.special import logsumexp

from pymtlr.core.exceptions import NumericalError
from pymtlr.survival._encoding import EncodedTargets


def add_bias_column(X: NDArray) -> NDArray:
    """Prepend a column of ones to X."""
    return np.column_stack([np.ones(X.shape[0]), X])


def transition_scores(X1: NDArray, W: NDArray) -> NDArray:
    """Transition scores s (N, m+1) for bias-augmented rows X1."""
    F = X1 @ W
    S = np.zeros((F.shape[0], F.shape[1] + 1))
    S[:, 1:] = np.cumsum(F, axis=1)
    return S


def transition_log_probs(X1: NDArray, W: NDArray) -> NDArray:
    """Log-probabilities (N, m+1) of each transition index."""
    S = transition_scores(X1, W)
    return S - logsumexp(S, axis=1, keepdims=True)


def _tail_sums(P: NDArray) -> NDArray:
    """T[:, k] = sum_{j >= k} P[:, j]."""
    return np.cumsum(P[:, ::-1], axis=1)[:, ::-1]


class MTLRObjective:
    """
    Penalized negative log-likelihood over the flattened weight matrix.

    The parameter vector is W.ravel() for W of shape (p+1, m); row 0 holds
    the biases. Method names follow scipy.optimize.minimize conventions:
    pass ``value_and_gradient`` with ``jac=True``.

    Parameters
    ----------
    X : NDArray
        (N, p) design matrix, already normalized, without bias column.
    targets : EncodedTargets
        Consistent transition ranges for the N subjects.
    C1 : float
        Inverse strength of the L2 magnitude penalty (> 0).
    C2 : float
        Strength of the adjacent-column smoothness penalty (>= 0).
    """

    def __init__(self, X: NDArray, targets: EncodedTargets, C1: float, C2: float):
        if targets.n != X.shape[0]:
            raise ValueError(
                f"targets cover {targets.n} subjects but X has {X.shape[0]} rows"
            )
        self.X1 = add_bias_column(np.asarray(X, dtype=np.float64))
        self.targets = targets
        self.mask = targets.mask
        self.C1 = float(C1)
        self.C2 = float(C2)
        self.n_obs = self.X1.shape[0]
        self.n_rows = self.X1.shape[1]
        self.n_points = targets.n_points
        self.n_params = self.n_rows * self.n_points
        self.stage = "full"

    def unpack(self, theta: NDArray) -> NDArray:
        return np.asarray(theta, dtype=np.float64).reshape(self.n_rows, self.n_points)

    def log_likelihood(self, W: NDArray) -> NDArray:
        """Per-subject log-likelihood (N,)."""
        S = transition_scores(self.X1, W)
        log_z = logsumexp(S, axis=1)
        log_c = logsumexp(np.where(self.mask, S, -np.inf), axis=1)
        return log_c - log_z

    def penalty(self, W: NDArray) -> float:
        V = W[1:]
        value = 0.5 / self.C1 * float(np.sum(V * V))
        if self.C2 > 0 and self.n_points > 1:
            d = np.diff(V, axis=1)
            value += 0.5 * self.C2 * float(np.sum(d * d))
        return value

    def penalty_gradient(self, W: NDArray) -> NDArray:
        grad = np.zeros_like(W)
        V = W[1:]
        grad[1:] = V / self.C1
        if self.C2 > 0 and self.n_points > 1:
            d = self.C2 * np.diff(V, axis=1)
            grad[1:, 1:] += d
            grad[1:, :-1] -= d
        return grad

    def value_and_gradient(self, theta: NDArray) -> tuple[float, NDArray]:
        """Objective value and flattened gradient at theta."""
        W = self.unpack(theta)
        S = transition_scores(self.X1, W)

        log_z = logsumexp(S, axis=1)
        S_obs = np.where(self.mask, S, -np.inf)
        log_c = logsumexp(S_obs, axis=1)

        value = -float(np.sum(log_c - log_z)) + self.penalty(W)

        P = np.exp(S - log_z[:, None])
        Q = np.exp(S_obs - log_c[:, None])
        G = _tail_sums(P)[:, 1:] - _tail_sums(Q)[:, 1:]
        grad = self.X1.T @ G + self.penalty_gradient(W)

        if not np.isfinite(value) or not np.all(np.isfinite(grad)):
            raise NumericalError(
                f"MTLR objective became non-finite during stage '{self.stage}' "
                f"(value={value!r})",
                stage=self.stage,
            )
        return value, grad.ravel()

    def compute_objective(self, theta: NDArray) -> float:
        return self.value_and_gradient(theta)[0]

    def compute_gradient(self, theta: NDArray) -> NDArray:
        return self.value_and_gradient(theta)[1]
