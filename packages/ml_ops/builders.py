# packages/ml_ops/builders.py

from numbers import Real
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from packages.contracts.schemas import (
    ExplanationResult,
    FeatureContribution,
    PredictionResult,
    TrainingRequest,
)
from packages.xai_lib.exceptions import ValidationError

T = TypeVar("T", bound=BaseModel)


class _SchemaBuilder:
    """
    Collects fields through chained setters and validates once, in build().
    Setters never raise, so a half-filled builder is always safe to hold.
    Not thread-safe; use one builder per object under construction.
    """

    def __init__(self):
        self._fields: Dict[str, Any] = {}
        self._items: Dict[str, list] = {}
        self._entries: Dict[str, dict] = {}

    def _set(self, name: str, value):
        # A setter replaces whatever add_* collected for the same field
        self._fields[name] = value
        self._items.pop(name, None)
        self._entries.pop(name, None)
        return self

    def _append(self, name: str, *items):
        self._items.setdefault(name, []).extend(items)
        return self

    def _put(self, name: str, key, value):
        self._entries.setdefault(name, {})[key] = value
        return self

    def _merged(self) -> Dict[str, Any]:
        fields = dict(self._fields)
        for name, items in self._items.items():
            base = fields.get(name)
            if base is None:
                fields[name] = list(items)
            elif isinstance(base, Iterable) and not isinstance(base, (str, Mapping)):
                fields[name] = [*base, *items]
        for name, entries in self._entries.items():
            base = fields.get(name)
            if base is None:
                fields[name] = dict(entries)
            elif isinstance(base, Mapping):
                fields[name] = {**base, **entries}
        return fields

    def _build(self, schema: Type[T]) -> T:
        # Unset fields are left out so the schema reports them as required;
        # anything else, malformed or not, goes to the schema as given
        fields = {k: v for k, v in self._merged().items() if v is not None}
        try:
            return schema(**fields)
        except PydanticValidationError as e:
            raise ValidationError(_describe(e)) from e


def _describe(error: PydanticValidationError) -> List[str]:
    messages = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"])
        msg = err["msg"].removeprefix("Value error, ")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return messages


class TrainingRequestBuilder(_SchemaBuilder):
    def set_dataset_id(self, dataset_id: int) -> "TrainingRequestBuilder":
        return self._set("dataset_id", dataset_id)

    def set_model_name(self, model_name: str) -> "TrainingRequestBuilder":
        return self._set("model_name", model_name)

    def set_model_type(self, model_type) -> "TrainingRequestBuilder":
        return self._set("model_type", model_type)

    def set_target_variable(self, target_variable: str) -> "TrainingRequestBuilder":
        return self._set("target_variable", target_variable)

    def set_feature_names(self, feature_names: Iterable[str]) -> "TrainingRequestBuilder":
        return self._set("feature_names", feature_names)

    def add_feature_name(self, feature_name: str) -> "TrainingRequestBuilder":
        return self._append("feature_names", feature_name)

    def add_feature_names(self, feature_names: Iterable[str]) -> "TrainingRequestBuilder":
        if isinstance(feature_names, Iterable) and not isinstance(feature_names, str):
            return self._append("feature_names", *feature_names)
        return self._append("feature_names", feature_names)

    def build(self) -> TrainingRequest:
        return self._build(TrainingRequest)


class PredictionResultBuilder(_SchemaBuilder):
    def set_prediction(self, prediction: str) -> "PredictionResultBuilder":
        return self._set("prediction", prediction)

    def set_confidence(self, confidence: float) -> "PredictionResultBuilder":
        return self._set("confidence", confidence)

    def set_probabilities(self, probabilities: Mapping[str, float]) -> "PredictionResultBuilder":
        return self._set("probabilities", probabilities)

    def add_probability(self, label: str, probability: float) -> "PredictionResultBuilder":
        return self._put("probabilities", label, probability)

    def set_input_data(self, input_data: Mapping[str, str]) -> "PredictionResultBuilder":
        return self._set("input_data", input_data)

    def add_input_data(self, key: str, value: str) -> "PredictionResultBuilder":
        return self._put("input_data", key, value)

    def build(self) -> PredictionResult:
        return self._build(PredictionResult)


class ExplanationResultBuilder(_SchemaBuilder):
    def set_prediction(self, prediction: str) -> "ExplanationResultBuilder":
        return self._set("prediction", prediction)

    def set_feature_contributions(
        self, contributions: Iterable[FeatureContribution]
    ) -> "ExplanationResultBuilder":
        return self._set("feature_contributions", contributions)

    def add_feature_contribution(
        self,
        contribution: Union[FeatureContribution, str],
        value: Optional[float] = None,
    ) -> "ExplanationResultBuilder":
        """Accepts a FeatureContribution, or a feature name plus its signed value."""
        if not isinstance(contribution, FeatureContribution):
            contribution = {
                "feature_name": contribution,
                "contribution": value,
            }
            # Non-numeric values are left for the schema to reject
            if isinstance(value, Real):
                contribution["direction"] = "positive" if value >= 0 else "negative"
        return self._append("feature_contributions", contribution)

    def set_input_data(self, input_data: Mapping[str, str]) -> "ExplanationResultBuilder":
        return self._set("input_data", input_data)

    def add_input_data(self, key: str, value: str) -> "ExplanationResultBuilder":
        return self._put("input_data", key, value)

    def set_explanation_text(self, text: str) -> "ExplanationResultBuilder":
        return self._set("explanation_text", text)

    def set_warning(self, warning: Optional[str]) -> "ExplanationResultBuilder":
        return self._set("warning", warning)

    def build(self) -> ExplanationResult:
        return self._build(ExplanationResult)
