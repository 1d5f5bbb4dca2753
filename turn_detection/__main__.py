import sys
import json
import logging

from .config import SCORING_MODE, setup_logging
from .errors import EOUError
from .loader import load_detector
from .models import parse_conversation

logger = logging.getLogger(__name__)


def main(detector, messages, mode=SCORING_MODE):
    try:
        conversation = parse_conversation(messages)
        result = detector.estimate(conversation, mode)

        print(json.dumps({
            "output": f"End of utterance probability: {result.probability}",
            "outputType": "text"
        }))
        return 0
    except (EOUError, ValueError) as e:
        logger.exception("Estimation failed")
        print(json.dumps({
            "output": f"Error: {str(e)}",
            "outputType": "text"
        }))
        return 1


def run():
    setup_logging()
    try:
        messages = json.load(sys.stdin)
    except json.JSONDecodeError as e:
        print(json.dumps({
            "output": f"JSON Decode Error: {str(e)}",
            "outputType": "text"
        }))
        return 1

    return main(load_detector(), messages, SCORING_MODE)


if __name__ == "__main__":
    sys.exit(run())
