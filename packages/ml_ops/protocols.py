from typing import Optional, Protocol

import pandas as pd


class DatasetProvider(Protocol):
    """
    The storage collaborator that owns uploaded datasets.
    The core never reads files itself; it asks for a frame by id.
    """

    def load(self, dataset_id: int) -> Optional[pd.DataFrame]:
        """
        Returns the dataset as a DataFrame with one column per variable,
        or None when the dataset has no rows to offer.
        """
        ...
