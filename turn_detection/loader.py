"""Loads the tokenizer and model once at startup and wires up a detector."""
import logging
import time
from typing import Optional

from transformers import AutoModelForCausalLM, AutoModelForSequenceClassification

from .config import (
    DEVICE,
    END_OF_TURN_TOKEN,
    EOU_CLASS_INDEX,
    EOU_THRESHOLD,
    MAX_HISTORY_TOKENS,
    MODEL_ID,
    MODEL_KIND,
    MODEL_OUTPUT_NAME,
    MODEL_PATH
)
from .inference import CausalLMRunner, InferenceRunner, OnnxRunner, SequenceClassificationRunner
from .template import ChatTemplateRenderer
from .tokenizer import HuggingFaceTokenizer
from .turn import ConversationTurnDetector

logger = logging.getLogger(__name__)

ONNX_KIND = "onnx"

RUNNERS = {
    "classification": (AutoModelForSequenceClassification, SequenceClassificationRunner),
    "causal-lm": (AutoModelForCausalLM, CausalLMRunner),
}


def load_tokenizer(model_id: str = MODEL_ID) -> HuggingFaceTokenizer:
    logger.info(f"Loading tokenizer {model_id}...")
    return HuggingFaceTokenizer.from_pretrained(model_id)


def load_runner(
    model_id: str = MODEL_ID,
    kind: str = MODEL_KIND,
    device: str = DEVICE,
    output_name: str = MODEL_OUTPUT_NAME
) -> InferenceRunner:
    """
    Load model weights and return a ready-to-run inference runner.

    Args:
        model_id: Hugging Face model id or local path; for ``onnx`` the path
            of the exported model artifact
        kind: ``classification``, ``causal-lm`` or ``onnx``
        device: Torch device the model is moved to (ignored for ``onnx``)
        output_name: Model output holding the scores

    Raises:
        ValueError: If ``kind`` is not a known model kind
    """
    start_time = time.time()

    if kind == ONNX_KIND:
        runner = OnnxRunner.from_path(model_id, output_name=output_name)
        logger.info(f"Loaded onnx model {model_id} in {time.time() - start_time:.3f}s")
        return runner

    if kind not in RUNNERS:
        raise ValueError(
            f"Unknown model kind {kind!r}, expected one of {sorted([*RUNNERS, ONNX_KIND])}"
        )
    model_class, runner_class = RUNNERS[kind]

    model = model_class.from_pretrained(model_id)
    model.to(device)
    model.eval()
    logger.info(f"Loaded {kind} model {model_id} on {device} in {time.time() - start_time:.3f}s")

    return runner_class(model, device=device, output_name=output_name)


def load_detector(
    model_id: str = MODEL_ID,
    kind: str = MODEL_KIND,
    device: str = DEVICE,
    output_name: str = MODEL_OUTPUT_NAME,
    model_path: str = MODEL_PATH,
    end_token: str = END_OF_TURN_TOKEN,
    end_token_id: Optional[int] = EOU_CLASS_INDEX,
    max_tokens: int = MAX_HISTORY_TOKENS,
    threshold: float = EOU_THRESHOLD,
    use_model_template: bool = True
) -> ConversationTurnDetector:
    """
    Build a detector from configuration.

    The tokenizer always comes from ``model_id``. The ``onnx`` kind loads its
    weights from ``model_path`` instead. With ``use_model_template`` the
    tokenizer's own chat template renders the conversation; otherwise the
    built-in ChatML template is used.
    """
    tokenizer = load_tokenizer(model_id)
    weights = model_path if kind == ONNX_KIND else model_id
    runner = load_runner(weights, kind=kind, device=device, output_name=output_name)

    template = tokenizer.apply_chat_template if use_model_template else None
    renderer = ChatTemplateRenderer(template=template, end_marker=end_token)

    return ConversationTurnDetector(
        tokenizer,
        runner,
        renderer=renderer,
        max_tokens=max_tokens,
        end_token=end_token,
        end_token_id=end_token_id,
        threshold=threshold
    )
