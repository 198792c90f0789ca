# packages/ml_ops/explain/engine.py

from typing import List, Mapping, Optional, Tuple

import numpy as np

from packages.contracts.schemas import ExplanationResult, FeatureContribution
from packages.ml_ops.artifacts import TrainedModel
from packages.ml_ops.builders import ExplanationResultBuilder
from packages.ml_ops.modeling.encoding import encode_row
from packages.ml_ops.modeling.scoring import score_row
from packages.xai_lib.config import XaiConfig
from packages.xai_lib.exceptions import DegenerateModelError
from packages.xai_lib.logging import get_logger
from .narrative import summarize

UNAVAILABLE = "unavailable"


class AttributionEngine:
    """
    Explains a single prediction of a linear model.

    Each feature's contribution is weight x value x base factor, scaled by the
    configured name multiplier. Contributions below the threshold are dropped,
    the rest are ranked by magnitude and capped. When no trustworthy
    attribution exists the engine either raises or, if fallback is enabled,
    returns a uniform explanation that always carries a warning.

    The engine only reads the model, so concurrent calls need no locking.
    """

    def __init__(self, xai_config: XaiConfig, logger=None):
        self.config = xai_config
        self.logger = logger or get_logger("attribution")

    def explain(
        self, model: TrainedModel, input_data: Mapping[str, str]
    ) -> ExplanationResult:
        # 1. Coerce (raises MissingOrInvalidFeatureError)
        row = encode_row(model.feature_names, input_data)

        prediction, class_index, reason = self._predict(model, row)

        contributions: List[FeatureContribution] = []
        if reason is None:
            try:
                contributions = self._rank(self._attribute(model, row[0], class_index))
            except DegenerateModelError as e:
                reason = str(e)

        if reason is None and not contributions:
            reason = (
                "no feature contribution reached the minimum threshold of "
                f"{self.config.min_contribution_threshold}"
            )

        warning = None
        if reason is not None:
            if not self.config.enable_fallback_explanation:
                raise DegenerateModelError(
                    f"Cannot explain '{model.model_name}': {reason}"
                )
            self.logger.warning(f"Using fallback explanation: {reason}")
            contributions = self._fallback(model)
            warning = (
                f"Approximate explanation: {reason}. Contributions are uniform "
                "across features and do not reflect the model's weights."
            )

        return (
            ExplanationResultBuilder()
            .set_prediction(prediction)
            .set_feature_contributions(contributions)
            .set_input_data({k: str(v) for k, v in input_data.items()})
            .set_explanation_text(
                summarize(
                    prediction,
                    contributions,
                    self.config.summary_features,
                    approximate=warning is not None,
                )
            )
            .set_warning(warning)
            .build()
        )

    def _predict(self, model: TrainedModel, row) -> Tuple[str, int, Optional[str]]:
        try:
            score = score_row(model, row)
        except (AttributeError, TypeError, ValueError, IndexError) as e:
            return UNAVAILABLE, 0, f"the model could not score the input ({e})"
        return score.label, score.class_index, None

    def _attribute(
        self, model: TrainedModel, values: np.ndarray, class_index: int
    ) -> List[Tuple[str, float]]:
        # 2-3. Raw contribution, then the name multiplier
        coef, _ = model.weights()
        weights = coef[class_index]
        base = self.config.base_factor(model.model_type)

        raw = []
        for name, weight, value in zip(model.feature_names, weights, values):
            contribution = (
                float(weight) * float(value) * base * self.config.feature_multiplier(name)
            )
            self.logger.debug(
                f"Feature {name}: value={value}, weight={weight}, contribution={contribution}"
            )
            raw.append((name, contribution))

        self.logger.info(
            f"Generated {len(raw)} feature contributions for {model.model_type.lower()} model"
        )
        return raw

    def _rank(self, raw: List[Tuple[str, float]]) -> List[FeatureContribution]:
        # 4. Threshold
        kept = [
            (name, c)
            for name, c in raw
            if abs(c) >= self.config.min_contribution_threshold
        ]
        # 5. Rank and cap; the sort is stable so ties keep declared order
        kept.sort(key=lambda item: -abs(item[1]))
        kept = kept[: self.config.max_features_in_explanation]
        return [FeatureContribution.of(name, c) for name, c in kept]

    def _fallback(self, model: TrainedModel) -> List[FeatureContribution]:
        names = model.feature_names[: self.config.max_features_in_explanation]
        share = 1.0 / len(names)
        return [FeatureContribution.of(name, share) for name in names]
