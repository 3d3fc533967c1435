"""
MTLRDesign: immutable container for mixed-censoring survival data.

Wraps the design matrix, event times, censoring types and optional
interval upper bounds. Validates inputs at construction time: all
downstream code trusts clean data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Sequence

import numpy as np
from numpy.typing import NDArray

from pymtlr.core.exceptions import DataError, DimensionError, EncodingError
from pymtlr.core.protocols import CAPABILITY_MATERIALIZED, CAPABILITY_REPEATABLE
from pymtlr.core.validation import (
    check_array,
    check_choice,
    check_consistent_length,
    check_finite,
    check_min_samples,
    check_positive,
)
from pymtlr.survival._common import (
    CENSOR_INTERVAL,
    CENSOR_NONE,
    CENSOR_RIGHT,
    CENSOR_TYPES,
)


def as_censor_types(censor_type, n: int | None = None) -> NDArray:
    """Normalize censoring labels to an array of canonical strings.

    Numeric input is read as an event indicator (1 = event observed,
    0 = right-censored), matching the usual ``Surv(time, status)`` form.
    A single string is broadcast to ``n`` subjects.

    Raises
    ------
    EncodingError
        If a label is not one of "none", "right", "left", "interval".
    """
    if isinstance(censor_type, str):
        if n is None:
            raise ValueError("n is required to broadcast a single censor type")
        censor_type = [censor_type] * n

    arr = np.asarray(censor_type)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    arr = arr.ravel()

    if arr.dtype.kind in "biuf":
        values = arr.astype(np.float64)
        bad = ~np.isin(values, (0.0, 1.0))
        if np.any(bad):
            idx = int(np.flatnonzero(bad)[0])
            raise EncodingError(
                f"censor_type: numeric labels must be event indicators 0/1, "
                f"got {values[idx]!r} at position {idx}",
                index=idx,
            )
        return np.where(values == 1.0, CENSOR_NONE, CENSOR_RIGHT).astype(object)

    # None must not be read as the label "none"
    labels = np.array(
        ["" if v is None else str(v).lower() for v in arr], dtype=object
    )
    bad = ~np.isin(labels, CENSOR_TYPES)
    if np.any(bad):
        idx = int(np.flatnonzero(bad)[0])
        raise EncodingError(
            f"censor_type: unrecognized censoring type {arr[idx]!r} at "
            f"position {idx}; expected one of {', '.join(CENSOR_TYPES)}",
            index=idx,
        )
    return labels


def feature_names_for(X, p: int, feature_names: Sequence[str] | None) -> tuple[str, ...]:
    """Resolve feature names from an explicit list, DataFrame columns, or x0..x{p-1}."""
    if feature_names is None and hasattr(X, "columns"):
        feature_names = [str(c) for c in X.columns]
    if feature_names is None:
        return tuple(f"x{i}" for i in range(p))
    names = tuple(str(c) for c in feature_names)
    if len(names) != p:
        raise DimensionError(
            f"feature_names has {len(names)} entries but X has {p} columns"
        )
    return names


@dataclass(frozen=True)
class MTLRDesign:
    """Immutable survival data container.

    Parameters
    ----------
    X : NDArray
        Design matrix (n, p), finite, no missing values.
    time : NDArray
        Event time (n,): the observed time for "none", the censoring time
        for "right"/"left", and the lower bound for "interval". Positive.
    censor_type : NDArray
        (n,) object array of "none", "right", "left", "interval".
    upper : NDArray
        (n,) interval upper bounds; NaN for non-interval subjects, may be
        +inf for open intervals.
    feature_names : tuple of str
        Column names of X, in order.
    """

    X: NDArray
    time: NDArray
    censor_type: NDArray
    upper: NDArray
    feature_names: tuple[str, ...]

    @classmethod
    def for_fit(
        cls,
        X,
        time,
        censor_type,
        *,
        upper=None,
        feature_names: Sequence[str] | None = None,
        na_action: Literal["fail", "omit"] = "fail",
    ) -> MTLRDesign:
        """Create and validate survival data.

        Parameters
        ----------
        X : array-like or None
            Covariate matrix (n, p). None fits a covariate-free model.
        time : array-like
            Event or censoring times.
        censor_type : array-like or str
            Censoring label per subject, or 0/1 event indicators.
        upper : array-like or None
            Upper bounds for interval-censored subjects.
        feature_names : sequence of str or None
            Names for the columns of X.
        na_action : str
            "fail" raises DataError on missing values, "omit" drops the
            incomplete rows.

        Returns
        -------
        MTLRDesign

        Raises
        ------
        DataError
            Missing or non-finite values, non-positive times, or interval
            bounds with lower >= upper.
        DimensionError
            Inconsistent lengths.
        EncodingError
            Unrecognized censoring labels.
        """
        check_choice(na_action, ("fail", "omit"), "na_action")

        time_arr = check_array(time, "time").ravel()
        n = time_arr.shape[0]
        check_min_samples(time_arr, 1, "time")

        if X is None:
            X_arr = np.zeros((n, 0), dtype=np.float64)
        else:
            X_arr = check_array(X, "X")
            if X_arr.ndim == 1:
                X_arr = X_arr.reshape(-1, 1)
            if X_arr.ndim != 2:
                raise DimensionError(f"X: expected 1D or 2D array, got {X_arr.ndim}D")
        names = feature_names_for(X, X_arr.shape[1], feature_names)

        ctype = as_censor_types(censor_type, n)

        if upper is None:
            upper_arr = np.full(n, np.nan)
        else:
            upper_arr = check_array(upper, "upper").ravel()

        check_consistent_length(
            X_arr, time_arr, ctype, upper_arr,
            names=("X", "time", "censor_type", "upper"),
        )

        missing = np.isnan(time_arr) | np.any(np.isnan(X_arr), axis=1)
        if np.any(missing):
            if na_action == "fail":
                rows = tuple(int(i) for i in np.flatnonzero(missing)[:10])
                raise DataError(
                    f"{int(np.sum(missing))} observations have missing values "
                    f"(rows {list(rows)}); impute them or pass na_action='omit'",
                    n_bad=int(np.sum(missing)),
                    rows=rows,
                )
            keep = ~missing
            X_arr, time_arr = X_arr[keep], time_arr[keep]
            ctype, upper_arr = ctype[keep], upper_arr[keep]
            check_min_samples(time_arr, 1, "time (after omitting missing rows)")

        check_finite(X_arr, "X")
        check_finite(time_arr, "time")
        check_positive(time_arr, "time")

        is_interval = ctype == CENSOR_INTERVAL
        if np.any(is_interval):
            u = upper_arr[is_interval]
            lo = time_arr[is_interval]
            bad = np.isnan(u) | ~(u > lo)
            if np.any(bad):
                rows = tuple(int(i) for i in np.flatnonzero(is_interval)[bad][:10])
                raise DataError(
                    f"interval-censored observations need upper > time; "
                    f"{int(np.sum(bad))} violate this (rows {list(rows)})",
                    n_bad=int(np.sum(bad)),
                    rows=rows,
                )
        upper_arr = np.where(is_interval, upper_arr, np.nan)

        return cls(
            X=X_arr,
            time=time_arr,
            censor_type=ctype,
            upper=upper_arr,
            feature_names=names,
        )

    def subset(self, indices) -> MTLRDesign:
        """Design restricted to the given rows (already validated)."""
        idx = np.asarray(indices, dtype=np.intp)
        return MTLRDesign(
            X=self.X[idx],
            time=self.time[idx],
            censor_type=self.censor_type[idx],
            upper=self.upper[idx],
            feature_names=self.feature_names,
        )

    def normalization(self, normalize: bool = True) -> tuple[NDArray, NDArray]:
        """Column centers and scales (sample standard deviation).

        Constant columns keep scale 1. With ``normalize=False`` the
        identity transform is returned.
        """
        if not normalize or self.n < 2:
            return np.zeros(self.p), np.ones(self.p)
        center = self.X.mean(axis=0)
        scale = self.X.std(axis=0, ddof=1)
        scale = np.where(scale > 0, scale, 1.0)
        return center, scale

    @property
    def n(self) -> int:
        """Number of observations."""
        return int(self.time.shape[0])

    @property
    def p(self) -> int:
        """Number of covariates."""
        return int(self.X.shape[1])

    @property
    def n_observations(self) -> int:
        return self.n

    @property
    def is_uncensored(self) -> NDArray:
        return self.censor_type == CENSOR_NONE

    @property
    def censor_counts(self) -> dict[str, int]:
        """Number of subjects per censoring type."""
        return {c: int(np.sum(self.censor_type == c)) for c in CENSOR_TYPES}

    @property
    def metadata(self) -> dict[str, Any]:
        meta: dict[str, Any] = {"n": self.n, "p": self.p}
        meta.update({f"n_{c}": k for c, k in self.censor_counts.items()})
        return meta

    def supports(self, capability: str) -> bool:
        return capability in (CAPABILITY_MATERIALIZED, CAPABILITY_REPEATABLE)
