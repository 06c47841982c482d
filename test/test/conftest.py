import logging
from typing import Any, Callable, List

import numpy as np
import numpy.typing as npt
import pandas as pd
import pytest

import mcshapley

logging.basicConfig(level=logging.DEBUG)
log = logging.getLogger(__name__)

log.info(f"testing mcshapley {mcshapley.__version__}")

# configure pandas text output

# get display width from terminal
pd.set_option("display.width", None)
# 3 digits precision for easier readability
pd.set_option("display.precision", 3)

N_OBSERVATIONS = 1000
FEATURES = ["x1", "x2", "x3"]


class CountingPredictionFunction:
    """
    Prediction function returning the first feature's values, counting its calls.
    """

    def __init__(self) -> None:
        self.n_calls = 0
        self.batch_sizes: List[int] = []

    def __call__(self, model: Any, data: pd.DataFrame) -> npt.NDArray[np.float64]:
        self.n_calls += 1
        self.batch_sizes.append(len(data))
        return data.iloc[:, 0].to_numpy()


def predict_x1(model: Any, data: pd.DataFrame) -> pd.Series:
    return data.loc[:, "x1"]


def predict_linear(model: npt.NDArray[np.float64], data: pd.DataFrame) -> pd.Series:
    # the model is a vector of weights, one for each column
    return data @ model


def predict_with_interaction(model: Any, data: pd.DataFrame) -> pd.Series:
    return data.loc[:, "x1"] + 2.0 * data.loc[:, "x2"] * data.loc[:, "x3"]


def predict_first_column(model: Any, data: npt.NDArray[np.float64]) -> npt.NDArray:
    return data[:, 0]


@pytest.fixture  # type: ignore
def n_jobs() -> int:
    return 2


@pytest.fixture  # type: ignore
def uniform_features() -> pd.DataFrame:
    rng = np.random.default_rng(42)
    return pd.DataFrame(
        data=rng.uniform(size=(N_OBSERVATIONS, len(FEATURES))),
        columns=FEATURES,
    )


@pytest.fixture  # type: ignore
def small_features() -> pd.DataFrame:
    rng = np.random.default_rng(7)
    return pd.DataFrame(
        data=rng.uniform(size=(50, len(FEATURES))),
        columns=FEATURES,
        index=pd.Index([f"obs_{i}" for i in range(50)], name="observation"),
    )


@pytest.fixture  # type: ignore
def mixed_features() -> pd.DataFrame:
    rng = np.random.default_rng(3)
    n = 40
    return pd.DataFrame(
        {
            "size": rng.uniform(size=n),
            "count": rng.integers(0, 10, size=n),
            "color": pd.Categorical(
                rng.choice(["red", "green", "blue"], size=n),
                categories=["red", "green", "blue"],
            ),
            "flag": rng.integers(0, 2, size=n).astype(bool),
        }
    )


@pytest.fixture  # type: ignore
def counting_pred_fn() -> CountingPredictionFunction:
    return CountingPredictionFunction()


@pytest.fixture  # type: ignore
def pred_x1() -> Callable[[Any, pd.DataFrame], pd.Series]:
    return predict_x1


@pytest.fixture  # type: ignore
def pred_linear() -> Callable[[npt.NDArray[np.float64], pd.DataFrame], pd.Series]:
    return predict_linear


@pytest.fixture  # type: ignore
def pred_interaction() -> Callable[[Any, pd.DataFrame], pd.Series]:
    return predict_with_interaction


@pytest.fixture  # type: ignore
def pred_first_column() -> Callable[[Any, npt.NDArray[np.float64]], npt.NDArray]:
    return predict_first_column
