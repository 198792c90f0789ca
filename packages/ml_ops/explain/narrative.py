from typing import Sequence

from packages.contracts.schemas import FeatureContribution


def summarize(
    prediction: str,
    contributions: Sequence[FeatureContribution],
    limit: int,
    approximate: bool = False,
) -> str:
    """Deterministic one-paragraph summary of the leading contributions."""
    top = contributions[:limit]

    if approximate:
        names = ", ".join(c.feature_name for c in top)
        return (
            f"The model predicted {prediction}. Feature weights could not be derived "
            f"from the model, so these features are listed with equal weight: {names}."
        )

    parts = [
        f"{c.feature_name} ({c.direction} impact: {c.contribution:.2f})" for c in top
    ]
    return (
        f"The model predicted {prediction}. "
        f"The prediction is primarily influenced by: {', '.join(parts)}."
    )
