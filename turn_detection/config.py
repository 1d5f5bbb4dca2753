"""Configuration management for the turn detector."""
import os
import logging
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Model Configuration
MODEL_ID = os.getenv("MODEL_ID", "livekit/turn-detector")
MODEL_KIND = os.getenv("MODEL_KIND", "causal-lm")  # causal-lm | classification | onnx
MODEL_PATH = os.getenv("MODEL_PATH", "./model.onnx")  # exported artifact, used by the onnx kind
MODEL_OUTPUT_NAME = os.getenv("MODEL_OUTPUT_NAME", "logits")  # e.g. "prob" for an exported head
DEVICE = os.getenv("DEVICE", "cpu")

# Scoring Configuration
SCORING_MODE = os.getenv("SCORING_MODE", "logits")  # head | logits
END_OF_TURN_TOKEN = os.getenv("END_OF_TURN_TOKEN", "<|im_end|>")
MAX_HISTORY_TOKENS = int(os.getenv("MAX_HISTORY_TOKENS", "512"))
EOU_THRESHOLD = float(os.getenv("EOU_THRESHOLD", "0.5"))


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


# Explicit end id, e.g. the EOU class of a sequence classifier. When unset the
# id of END_OF_TURN_TOKEN is resolved through the tokenizer.
EOU_CLASS_INDEX = _optional_int("EOU_CLASS_INDEX")

# Server Configuration
GRPC_PORT = int(os.getenv("GRPC_PORT", "50051"))
GRPC_MAX_WORKERS = int(os.getenv("GRPC_MAX_WORKERS", "4"))

# Benchmark Configuration
BENCH_INPUT_PATH = os.getenv("BENCH_INPUT_PATH", "./testFile")
BENCH_OUTPUT_PATH = os.getenv("BENCH_OUTPUT_PATH", "./result.json")

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_level: str = LOG_LEVEL) -> None:
    """Configure root logging for the process entry points."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT
    )
