import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence, Type, Union

import numpy as np

from .config import EOU_THRESHOLD, END_OF_TURN_TOKEN, MAX_HISTORY_TOKENS
from .errors import EOUError, InferenceBackendError, TokenizerBackendError
from .inference import InferenceRunner
from .models import ConversationTurn, EOUResult, ScoringMode
from .normalizer import normalize_conversation
from .scorer import score
from .template import ChatTemplateRenderer
from .tokenizer import TokenizerAdapter, enforce_budget, resolve_end_token_id

logger = logging.getLogger(__name__)


@contextmanager
def _stage(name: str, wrap: Optional[Type[EOUError]] = None) -> Iterator[None]:
    """Tag errors raised inside the block with the pipeline stage ``name``."""
    try:
        yield
    except EOUError as e:
        if e.stage is None:
            e.stage = name
        raise
    except Exception as e:
        if wrap is None:
            raise
        raise wrap(f"{type(e).__name__}: {e}", stage=name) from e


class ConversationTurnDetector:
    """
    Estimates the probability that the last speaker has finished their turn.

    The tokenizer and runner are loaded once by the application and shared;
    the detector keeps no per-call state, so ``estimate`` can be called
    concurrently for independent conversations.
    """
    DEFAULT_THRESHOLD = EOU_THRESHOLD

    def __init__(
        self,
        tokenizer: TokenizerAdapter,
        runner: InferenceRunner,
        renderer: Optional[ChatTemplateRenderer] = None,
        max_tokens: int = MAX_HISTORY_TOKENS,
        end_token: str = END_OF_TURN_TOKEN,
        end_token_id: Optional[int] = None,
        threshold: float = DEFAULT_THRESHOLD,
        strict_budget: bool = False
    ):
        if max_tokens < 1:
            raise ValueError(f"max_tokens must be positive, got {max_tokens}")

        self.tokenizer = tokenizer
        self.runner = runner
        self.renderer = renderer or ChatTemplateRenderer(end_marker=end_token)
        self.max_tokens = max_tokens
        self.threshold = threshold
        self.strict_budget = strict_budget

        if end_token_id is None:
            end_token_id = resolve_end_token_id(tokenizer, end_token)
        self.end_token_id = end_token_id

    def estimate(
        self,
        conversation: Sequence[ConversationTurn],
        mode: Union[ScoringMode, str] = ScoringMode.LOGITS
    ) -> EOUResult:
        """
        Runs normalize -> render -> tokenize -> infer -> score for one conversation.

        Latency covers the model call only.
        """
        mode = ScoringMode(mode)

        with _stage("normalize"):
            turns = normalize_conversation(conversation)

        with _stage("render"):
            text = self.renderer.render(turns)

        with _stage("tokenize", wrap=TokenizerBackendError):
            token_ids = self.tokenizer.encode(text, self.max_tokens)
            token_ids = enforce_budget(token_ids, self.max_tokens, truncate=not self.strict_budget)

        with _stage("inference", wrap=InferenceBackendError):
            start_time = time.perf_counter()
            raw_scores = self.runner.run(token_ids)
            latency_ms = int(round((time.perf_counter() - start_time) * 1000))
            if raw_scores is None:
                raise InferenceBackendError("Runner returned no scores")
            scores = np.asarray(raw_scores, dtype=np.float64).reshape(-1)

        with _stage("score"):
            logger.debug("Raw scores: %s", scores[:8])
            probability = score(scores, mode, self.end_token_id)

        logger.info(
            f"EOU probability: {probability:.4f} "
            f"({len(token_ids)} tokens, {latency_ms}ms, mode={mode.value})"
        )
        return EOUResult(probability=probability, latency_ms=latency_ms)

    def detect_turn_completion(
        self,
        conversation: Sequence[ConversationTurn],
        mode: Union[ScoringMode, str] = ScoringMode.LOGITS,
        threshold: Optional[float] = None
    ) -> bool:
        """
        Returns True if end-of-turn probability exceeds threshold.
        """
        if threshold is None:
            threshold = self.threshold
        return self.estimate(conversation, mode).probability > threshold
