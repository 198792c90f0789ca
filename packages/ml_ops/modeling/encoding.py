import math
from typing import Mapping, Sequence

import numpy as np

from packages.xai_lib.exceptions import MissingOrInvalidFeatureError


def encode_value(feature_name: str, raw) -> float:
    """Coerces one raw input value the same way training coerced its column."""
    if raw is None:
        raise MissingOrInvalidFeatureError(feature_name, "is missing from the input")
    if isinstance(raw, bool):
        raise MissingOrInvalidFeatureError(feature_name, f"is not numeric: {raw!r}")

    text = str(raw).strip()
    if not text:
        raise MissingOrInvalidFeatureError(feature_name, "is blank")
    try:
        value = float(text)
    except ValueError:
        raise MissingOrInvalidFeatureError(feature_name, f"is not numeric: {raw!r}")
    if not math.isfinite(value):
        raise MissingOrInvalidFeatureError(feature_name, f"is not finite: {raw!r}")
    return value


def encode_row(feature_names: Sequence[str], input_data: Mapping[str, str]) -> np.ndarray:
    """
    Builds the (1, n_features) row for a model, in its declared feature order.
    Keys not declared on the model are ignored.
    """
    values = [encode_value(name, input_data.get(name)) for name in feature_names]
    return np.asarray(values, dtype=float).reshape(1, -1)
