"""Inference runners over pre-loaded PyTorch and ONNX Runtime models."""
import logging
from typing import Any, Protocol, Sequence

import numpy as np
import onnxruntime as ort
import torch

logger = logging.getLogger(__name__)


class InferenceRunner(Protocol):
    """Single forward pass over an immutable, already loaded model."""

    def run(self, token_ids: Sequence[int]) -> np.ndarray:
        ...


class TorchRunner:
    """
    Base runner: batch of one, no gradients, scores returned as float64 numpy.

    Subclasses pick which slice of the model output holds the scores.
    """

    def __init__(self, model: Any, device: str = "cpu", output_name: str = "logits"):
        self.model = model
        self.device = device
        self.output_name = output_name

    def run(self, token_ids: Sequence[int]) -> np.ndarray:
        input_ids = torch.tensor([list(token_ids)], dtype=torch.long, device=self.device)

        with torch.no_grad():
            outputs = self.model(input_ids=input_ids)

        scores = self._select(self._output(outputs))
        return scores.detach().to("cpu", dtype=torch.float64).numpy().reshape(-1)

    def _output(self, outputs: Any) -> torch.Tensor:
        if isinstance(outputs, dict):
            return outputs[self.output_name]
        return getattr(outputs, self.output_name)

    def _select(self, output: torch.Tensor) -> torch.Tensor:
        raise NotImplementedError


class SequenceClassificationRunner(TorchRunner):
    """Class scores of a sequence classifier, shape ``[1, num_labels]``."""

    def _select(self, output: torch.Tensor) -> torch.Tensor:
        return output[0]


class CausalLMRunner(TorchRunner):
    """Next-token logits of a causal LM, shape ``[1, seq_len, vocab]``."""

    def _select(self, output: torch.Tensor) -> torch.Tensor:
        return output[0, -1, :]


class OnnxRunner:
    """
    Runner over an ONNX Runtime session, e.g. an exported turn detector
    whose ``prob`` output is already a probability.
    """

    def __init__(self, session: Any, output_name: str = "prob", input_name: str = "input_ids"):
        self.session = session
        self.output_name = output_name
        self.input_name = input_name

    @classmethod
    def from_path(cls, model_path: str, **kwargs: Any) -> "OnnxRunner":
        session = ort.InferenceSession(model_path, providers=["CPUExecutionProvider"])
        return cls(session, **kwargs)

    def run(self, token_ids: Sequence[int]) -> np.ndarray:
        input_ids = np.array([list(token_ids)], dtype=np.int64)
        outputs = self.session.run([self.output_name], {self.input_name: input_ids})
        return np.asarray(outputs[0], dtype=np.float64).reshape(-1)
