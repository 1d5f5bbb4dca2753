"""
Latency and probability benchmark over a file of sentences.

Each non-blank line is estimated as a single user turn. Results are written as
a JSON list of ``{"sentence", "probability", "latency_ms"}`` with the
probability expressed as a percentage.
"""
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from .config import BENCH_INPUT_PATH, BENCH_OUTPUT_PATH, SCORING_MODE, setup_logging
from .loader import load_detector
from .models import ConversationTurn, Role, ScoringMode
from .turn import ConversationTurnDetector

logger = logging.getLogger(__name__)


def read_sentences(path: Union[str, Path]) -> List[str]:
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    return [line for line in lines if line.strip()]


def run_benchmark(
    detector: ConversationTurnDetector,
    sentences: Iterable[str],
    mode: Union[ScoringMode, str] = SCORING_MODE
) -> List[Dict[str, Any]]:
    results = []
    for sentence in sentences:
        result = detector.estimate([ConversationTurn(Role.USER, sentence)], mode)
        results.append({
            "sentence": sentence,
            "probability": result.probability * 100,
            "latency_ms": result.latency_ms,
        })
    return results


def main(
    input_path: str = BENCH_INPUT_PATH,
    output_path: str = BENCH_OUTPUT_PATH,
    mode: Union[ScoringMode, str] = SCORING_MODE
) -> None:
    setup_logging()
    detector = load_detector()
    sentences = read_sentences(input_path)

    start_time = time.time()
    results = run_benchmark(detector, sentences, mode)
    elapsed_ms = (time.time() - start_time) * 1000

    Path(output_path).write_text(json.dumps(results), encoding="utf-8")
    logger.info(f"Estimated {len(results)} sentences in {elapsed_ms:.0f}ms, results in {output_path}")


if __name__ == "__main__":
    main()
