"""
Turn raw model scores into an end-of-utterance probability.

Two output shapes are supported and the caller always says which one applies:

* ``head``: the model already emits a single probability-like score.
* ``logits``: the model emits unnormalized scores over classes or a
  vocabulary; they are normalized with softmax and the mass on the
  end-of-turn id is returned.
"""
import logging
from typing import Optional, Sequence, Union

import numpy as np

from .errors import EmptyScoreVectorError, InvalidScoreError, InvalidTokenIndexError
from .models import ScoringMode

logger = logging.getLogger(__name__)

ScoreVector = Union[np.ndarray, Sequence[float]]


def _as_vector(scores: ScoreVector) -> np.ndarray:
    vector = np.asarray(scores, dtype=np.float64).reshape(-1)
    if vector.size == 0:
        raise EmptyScoreVectorError("Score vector is empty")
    if not np.all(np.isfinite(vector)):
        raise InvalidScoreError("Score vector contains NaN or infinite values")
    return vector


def softmax(scores: ScoreVector) -> np.ndarray:
    """
    Numerically stable softmax.

    The maximum is subtracted before exponentiation so large logits cannot
    overflow; the result is identical to the textbook formula otherwise.

    Raises:
        EmptyScoreVectorError: If ``scores`` is empty
        InvalidScoreError: If ``scores`` contains NaN or infinity
    """
    vector = _as_vector(scores)
    shifted = np.exp(vector - vector.max())
    return shifted / shifted.sum()


def score_from_logits(scores: ScoreVector, end_token_id: int) -> float:
    """
    Probability assigned to ``end_token_id`` after softmax normalization.

    Raises:
        EmptyScoreVectorError: If ``scores`` is empty
        InvalidTokenIndexError: If ``end_token_id`` is outside the vector
        InvalidScoreError: If ``scores`` contains NaN or infinity
    """
    vector = _as_vector(scores)
    if not 0 <= end_token_id < vector.size:
        raise InvalidTokenIndexError(
            f"End token id {end_token_id} is out of range for {vector.size} scores"
        )
    return float(softmax(vector)[end_token_id])


def score_from_head(scores: ScoreVector) -> float:
    """
    Use a single pre-activated head output directly as the probability.

    Raises:
        EmptyScoreVectorError: If ``scores`` is empty
        InvalidScoreError: If there is more than one score or it is not in [0, 1]
    """
    vector = _as_vector(scores)
    if vector.size != 1:
        raise InvalidScoreError(f"Head scoring expects a single score, got {vector.size}")
    probability = float(vector[0])
    if not 0.0 <= probability <= 1.0:
        raise InvalidScoreError(f"Head score {probability} is not a probability")
    return probability


def score(scores: ScoreVector, mode: ScoringMode, end_token_id: Optional[int] = None) -> float:
    """Dispatch to the scoring operation selected by ``mode``."""
    mode = ScoringMode(mode)
    if mode is ScoringMode.HEAD:
        return score_from_head(scores)
    if end_token_id is None:
        raise InvalidTokenIndexError("Logits scoring requires an end token id")
    return score_from_logits(scores, end_token_id)
