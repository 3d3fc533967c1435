"""
MTLRModel: the fitted, read-only MTLR artifact.

Wraps a Result[MTLRParams] and exposes user-friendly properties, curve
and statistic prediction, held-out log-likelihood, an R-style summary()
and JSON serialization.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pymtlr.core.result import Result
from pymtlr.survival._common import MTLRParams, readonly
from pymtlr.survival._curves import (
    build_curves,
    curve_matrix,
    prepare_features,
)
from pymtlr.survival._encoding import encode_targets
from pymtlr.survival._objective import MTLRObjective
from pymtlr.survival._statistics import compute_statistic
from pymtlr.survival.design import MTLRDesign

_FORMAT_VERSION = 1


class MTLRModel:
    """Fitted MTLR model.

    Immutable after fitting; safe to share across threads for prediction.
    """

    __slots__ = ('_result',)

    def __init__(self, _result: Result[MTLRParams]) -> None:
        self._result = _result

    # -- Properties delegating to MTLRParams --

    @property
    def params(self) -> MTLRParams:
        return self._result.params

    @property
    def time_grid(self) -> NDArray:
        """Cut points tau_1..tau_m (time 0 is implicit)."""
        return self._result.params.time_grid

    @property
    def weights(self) -> NDArray:
        """(p+1, m) weight matrix, bias row first."""
        return self._result.params.weights

    @property
    def biases(self) -> NDArray:
        return self._result.params.weights[0]

    @property
    def coefficients(self) -> NDArray:
        """(p, m) feature weights on the normalized scale."""
        return self._result.params.weights[1:]

    @property
    def feature_names(self) -> tuple[str, ...]:
        return self._result.params.feature_names

    @property
    def center(self) -> NDArray:
        return self._result.params.center

    @property
    def scale(self) -> NDArray:
        return self._result.params.scale

    @property
    def C1(self) -> float:
        return self._result.params.C1

    @property
    def C2(self) -> float:
        return self._result.params.C2

    @property
    def loglik(self) -> float:
        return self._result.params.loglik

    @property
    def objective(self) -> float:
        return self._result.params.objective

    @property
    def n_iter(self) -> int:
        return self._result.params.n_iter

    @property
    def converged(self) -> bool:
        return self._result.params.converged

    @property
    def n_observations(self) -> int:
        return self._result.params.n_observations

    @property
    def censor_counts(self) -> dict[str, int]:
        return dict(self._result.params.censor_counts)

    @property
    def n_features(self) -> int:
        return self._result.params.n_features

    @property
    def n_time_points(self) -> int:
        return self._result.params.n_time_points

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def timing(self):
        return self._result.timing

    @property
    def provenance(self) -> dict[str, str]:
        return self._result.provenance

    # -- Prediction --

    def survival_probabilities(self, X) -> NDArray:
        """(N, m+1) survival probabilities at [0, tau_1..tau_m]."""
        return build_curves(self._result.params, X)

    def predict_curves(self, X) -> NDArray:
        """SurvivalCurveMatrix (m+1, 1+N): grid with 0 prepended, then one column per row of X."""
        return curve_matrix(self.time_grid, self.survival_probabilities(X))

    def predict_statistic(self, X, kind: str = "mean", query_time=None) -> NDArray:
        """Mean or median survival time, or survival probability at query_time.

        Parameters
        ----------
        X : array-like
            (N, p) query rows.
        kind : str
            "mean", "median", or "prob_at_time".
        query_time : array-like or None
            One time per row; required for "prob_at_time".
        """
        return compute_statistic(self.predict_curves(X), kind, query_time)

    def log_likelihood(self, X, time, censor_type, *, upper=None) -> NDArray:
        """Per-subject log-likelihood of observations under the model.

        Observations are encoded on the model's own grid; penalties are
        not included.
        """
        design = MTLRDesign.for_fit(
            X, time, censor_type, upper=upper, feature_names=self.feature_names,
        )
        Xn = prepare_features(self._result.params, design.X)
        targets = encode_targets(
            design.time, design.censor_type, self.time_grid, design.upper
        )
        objective = MTLRObjective(Xn, targets, self.C1, self.C2)
        return objective.log_likelihood(self.weights)

    # -- Serialization --

    def to_dict(self) -> dict[str, Any]:
        """Plain-Python representation suitable for JSON."""
        p = self._result.params
        return {
            'format_version': _FORMAT_VERSION,
            'params': {
                'weights': p.weights.tolist(),
                'time_grid': p.time_grid.tolist(),
                'feature_names': list(p.feature_names),
                'center': p.center.tolist(),
                'scale': p.scale.tolist(),
                'feature_min': p.feature_min.tolist(),
                'feature_max': p.feature_max.tolist(),
                'C1': p.C1,
                'C2': p.C2,
                'loglik': p.loglik,
                'objective': p.objective,
                'n_iter': p.n_iter,
                'converged': p.converged,
                'n_observations': p.n_observations,
                'censor_counts': dict(p.censor_counts),
            },
            'info': self._result.info,
            'timing': self._result.timing,
            'backend_name': self._result.backend_name,
            'warnings': list(self._result.warnings),
            'provenance': dict(self._result.provenance),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MTLRModel:
        version = data.get('format_version')
        if version != _FORMAT_VERSION:
            raise ValueError(
                f"unsupported model format version {version!r}, "
                f"expected {_FORMAT_VERSION}"
            )
        raw = data['params']
        n_features = len(raw['feature_names'])
        weights = np.asarray(raw['weights'], dtype=np.float64).reshape(
            n_features + 1, len(raw['time_grid'])
        )
        params = MTLRParams(
            weights=readonly(weights),
            time_grid=readonly(raw['time_grid']),
            feature_names=tuple(raw['feature_names']),
            center=readonly(raw['center']),
            scale=readonly(raw['scale']),
            feature_min=readonly(raw['feature_min']),
            feature_max=readonly(raw['feature_max']),
            C1=float(raw['C1']),
            C2=float(raw['C2']),
            loglik=float(raw['loglik']),
            objective=float(raw['objective']),
            n_iter=int(raw['n_iter']),
            converged=bool(raw['converged']),
            n_observations=int(raw['n_observations']),
            censor_counts={k: int(v) for k, v in raw['censor_counts'].items()},
        )
        result = Result(
            params=params,
            info=dict(data.get('info', {})),
            timing=data.get('timing'),
            backend_name=data.get('backend_name', 'deserialized'),
            warnings=tuple(data.get('warnings', ())),
            provenance=dict(data.get('provenance', {})),
        )
        return cls(_result=result)

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    @classmethod
    def from_json(cls, text: str) -> MTLRModel:
        return cls.from_dict(json.loads(text))

    def save(self, path) -> None:
        """Write the model to ``path`` as JSON."""
        Path(path).write_text(self.to_json(indent=2))

    @classmethod
    def load(cls, path) -> MTLRModel:
        return cls.from_json(Path(path).read_text())

    # -- Display --

    def summary(self) -> str:
        """R-style summary of the MTLR fit."""
        lines = []
        lines.append("Call: mtlr()")
        lines.append("")
        counts = self.censor_counts
        lines.append(
            f"  n={self.n_observations}, events={counts.get('none', 0)}, "
            f"right={counts.get('right', 0)}, left={counts.get('left', 0)}, "
            f"interval={counts.get('interval', 0)}"
        )
        lines.append(
            f"  time points={self.n_time_points}, features={self.n_features}, "
            f"C1={self.C1:g}, C2={self.C2:g}"
        )
        lines.append(
            f"  log-likelihood={self.loglik:.4f}, objective={self.objective:.4f}"
        )
        lines.append(
            f"  converged={self.converged} (iterations: {self.n_iter})"
        )
        lines.append("")

        # Weight table: one row per feature, columns for up to 8 time points
        m = self.n_time_points
        show = min(m, 8)
        header = "  " + f"{'':>12s}" + "".join(
            f"  {self.time_grid[j]:>10.4g}" for j in range(show)
        )
        lines.append(header)
        names = ("(bias)",) + self.feature_names
        for name, row in zip(names, self.weights):
            lines.append(
                "  " + f"{name[:12]:>12s}" + "".join(
                    f"  {row[j]:10.4f}" for j in range(show)
                )
            )
        if m > show:
            lines.append(f"  ... ({m - show} more time points)")

        for w in self.warnings:
            lines.append(f"  Warning: {w}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"MTLRModel(n={self.n_observations}, "
            f"features={self.n_features}, "
            f"time_points={self.n_time_points}, "
            f"converged={self.converged})"
        )
