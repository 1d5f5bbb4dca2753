"""
gRPC front end for the turn detector.

Exposes ``turn.TurnDetector/CheckEndOfTurn`` with JSON-encoded bodies:

    request:  {"messages": [{"role": ..., "content": ...}], "mode": "logits", "threshold": 0.5}
    response: {"end_of_turn": true, "probability": 0.87, "latency_ms": 12}
"""
import json
import logging
import math
from concurrent import futures
from typing import Any, Dict

import grpc

from .config import GRPC_MAX_WORKERS, GRPC_PORT, SCORING_MODE, setup_logging
from .errors import EOUError, InferenceBackendError, TokenizerBackendError
from .loader import load_detector
from .models import parse_conversation
from .turn import ConversationTurnDetector

logger = logging.getLogger(__name__)

SERVICE_NAME = "turn.TurnDetector"


def _decode(data: bytes) -> Dict[str, Any]:
    return json.loads(data.decode("utf-8"))


def _encode(message: Dict[str, Any]) -> bytes:
    return json.dumps(message).encode("utf-8")


class TurnDetectorServicer:
    def __init__(self, detector: ConversationTurnDetector):
        self.detector = detector

    def CheckEndOfTurn(self, request: Dict[str, Any], context: grpc.ServicerContext) -> Dict[str, Any]:
        try:
            if not isinstance(request, dict):
                raise ValueError("Request body must be a JSON object")
            messages = parse_conversation(request.get("messages", []))
            mode = request.get("mode", SCORING_MODE)
            threshold = float(request.get("threshold", self.detector.threshold))
            if not math.isfinite(threshold):
                raise ValueError(f"Threshold must be a finite number, got {threshold}")
            result = self.detector.estimate(messages, mode)
        except (InferenceBackendError, TokenizerBackendError) as e:
            logger.exception("Turn detection backend failure")
            context.abort(grpc.StatusCode.INTERNAL, str(e))
        except (EOUError, ValueError, TypeError) as e:
            logger.warning(f"Rejected CheckEndOfTurn request: {e}")
            context.abort(grpc.StatusCode.INVALID_ARGUMENT, str(e))

        return {
            "end_of_turn": result.probability > threshold,
            "probability": result.probability,
            "latency_ms": result.latency_ms,
        }


def build_handler(servicer: TurnDetectorServicer) -> grpc.GenericRpcHandler:
    return grpc.method_handlers_generic_handler(SERVICE_NAME, {
        "CheckEndOfTurn": grpc.unary_unary_rpc_method_handler(
            servicer.CheckEndOfTurn,
            request_deserializer=_decode,
            response_serializer=_encode,
        ),
    })


def create_server(
    detector: ConversationTurnDetector,
    port: int = GRPC_PORT,
    max_workers: int = GRPC_MAX_WORKERS
) -> grpc.Server:
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=max_workers))
    server.add_generic_rpc_handlers((build_handler(TurnDetectorServicer(detector)),))
    server.add_insecure_port(f"[::]:{port}")
    return server


def serve():
    setup_logging()
    server = create_server(load_detector())
    server.start()
    logger.info(f"Turn Detector gRPC server is running on port {GRPC_PORT}")
    server.wait_for_termination()


if __name__ == '__main__':
    serve()
