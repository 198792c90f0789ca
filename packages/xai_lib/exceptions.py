# packages/xai_lib/exceptions.py

from typing import Iterable, List, Optional


class XaiError(Exception):
    """
    Base class for every typed failure raised by the core.
    Carries a machine-readable code and a message safe to show end users.
    """

    error_code = "XAI_ERROR"
    default_user_message = "An unexpected error occurred"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        user_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.user_message = user_message or self.default_user_message


class ValidationError(XaiError):
    """Malformed request or builder input. The caller must fix the input."""

    error_code = "VALIDATION_ERROR"
    default_user_message = "The request is invalid"

    def __init__(self, errors: Iterable[str], user_message: Optional[str] = None):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors), user_message=user_message)


class InvalidDatasetError(XaiError):
    """The dataset fails a training strategy's structural precondition."""

    error_code = "INVALID_DATASET"
    default_user_message = "The dataset cannot be used to train this model"


class UnsupportedModelType(XaiError):
    error_code = "UNSUPPORTED_MODEL_TYPE"
    default_user_message = "Model type must be CLASSIFICATION or REGRESSION"

    def __init__(self, model_type):
        self.model_type = model_type
        super().__init__(f"Unsupported model type: {model_type!r}")


class MissingOrInvalidFeatureError(XaiError):
    """Prediction input does not match the model's feature schema."""

    error_code = "INVALID_FEATURE"

    def __init__(self, feature_name: str, reason: str):
        self.feature_name = feature_name
        self.reason = reason
        super().__init__(
            f"Feature '{feature_name}' {reason}",
            user_message=f"Please provide a numeric value for '{feature_name}'",
        )


class DegenerateModelError(XaiError):
    """
    Raised when no trustworthy attribution exists and fallback
    explanations are disabled.
    """

    error_code = "DEGENERATE_MODEL"
    default_user_message = "This model's prediction cannot be explained"


class ConfigurationError(XaiError):
    error_code = "CONFIGURATION_ERROR"
    default_user_message = "The service is misconfigured"
