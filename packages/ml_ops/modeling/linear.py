import time
from typing import Optional

import torch
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.utils.validation import check_array, check_is_fitted, check_X_y
from torch import nn
from torch.utils.data import DataLoader, TensorDataset

# Deadline clock, module level so tests can drive it
_clock = time.monotonic


class AdaGradLinearRegressor(RegressorMixin, BaseEstimator):
    """
    Linear regression under squared-error loss, fitted by minibatch SGD with
    AdaGrad per-coordinate step sizes (a torch nn.Linear trained with
    torch.optim.Adagrad).

    Exposes the scikit-learn estimator API (fit / predict / coef_ / intercept_)
    so it travels through the same training and explanation code paths as the
    library's own linear models. Only numpy arrays are kept after fit, so the
    estimator pickles without torch state.

    Args:
        learning_rate: AdaGrad step size.
        initial_accumulator: starting value of the squared-gradient sum.
        lr_decay: step-size decay per update (0 keeps it constant).
        epochs: full passes over the data.
        minibatch_size: examples averaged per update.
        seed: shuffling seed; fixed so runs are reproducible.
        max_time_ms: optional deadline checked at each epoch boundary.
    """

    def __init__(
        self,
        learning_rate: float = 0.1,
        initial_accumulator: float = 0.1,
        lr_decay: float = 0.0,
        epochs: int = 10,
        minibatch_size: int = 1,
        seed: int = 12345,
        max_time_ms: Optional[int] = None,
    ):
        self.learning_rate = learning_rate
        self.initial_accumulator = initial_accumulator
        self.lr_decay = lr_decay
        self.epochs = epochs
        self.minibatch_size = minibatch_size
        self.seed = seed
        self.max_time_ms = max_time_ms

    def fit(self, X, y):
        X, y = check_X_y(X, y, dtype=float, y_numeric=True)
        n_features = X.shape[1]

        # 1. Tensors and a seeded loader
        X_t = torch.tensor(X, dtype=torch.float64)
        y_t = torch.tensor(y, dtype=torch.float64).view(-1, 1)
        train_loader = DataLoader(
            TensorDataset(X_t, y_t),
            batch_size=self.minibatch_size,
            shuffle=True,
            generator=torch.Generator().manual_seed(self.seed),
        )

        # 2. Model starts from zero weights, so no global RNG is involved
        model = nn.Linear(n_features, 1, dtype=torch.float64)
        with torch.no_grad():
            model.weight.zero_()
            model.bias.zero_()

        optimizer = torch.optim.Adagrad(
            model.parameters(),
            lr=self.learning_rate,
            lr_decay=self.lr_decay,
            initial_accumulator_value=self.initial_accumulator,
        )
        loss_fn = nn.MSELoss()

        deadline = None
        if self.max_time_ms is not None:
            deadline = _clock() + self.max_time_ms / 1000.0

        # 3. The training loop
        epochs_completed = 0
        stopped_early = False
        for _ in range(self.epochs):
            model.train()
            for X_batch, y_batch in train_loader:
                loss = loss_fn(model(X_batch), y_batch)

                optimizer.zero_grad()
                loss.backward()
                optimizer.step()

            epochs_completed += 1
            if deadline is not None and _clock() > deadline:
                stopped_early = epochs_completed < self.epochs
                break

        self.coef_ = model.weight.detach().numpy().ravel().copy()
        self.intercept_ = float(model.bias.detach().item())
        self.n_features_in_ = n_features
        self.n_epochs_ = epochs_completed
        self.stopped_early_ = stopped_early
        return self

    def predict(self, X):
        check_is_fitted(self, ["coef_", "intercept_"])
        X = check_array(X, dtype=float)
        return X @ self.coef_ + self.intercept_
