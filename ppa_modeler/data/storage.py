"""Deal scenario save/load functionality using JSON serialization."""

import json
import logging
from pathlib import Path

from ppa_modeler.models.project import Deal

logger = logging.getLogger(__name__)


def save_deal(deal: Deal, filepath: str) -> None:
    """Save a deal scenario to a JSON file.

    Only inputs are written; projections are recomputed after loading.

    Args:
        deal: Deal to save.
        filepath: Output file path (should end in .json).

    Raises:
        OSError: If file cannot be written.
    """
    data = deal.to_dict()
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    logger.info("Saved deal %r to %s", deal.name, path)


def load_deal(filepath: str) -> Deal:
    """Load a deal scenario from a JSON file.

    Args:
        filepath: Path to the JSON scenario file.

    Returns:
        Reconstructed Deal object.

    Raises:
        FileNotFoundError: If file does not exist.
        json.JSONDecodeError: If file is not valid JSON.
        ValueError: If a weekday or credit choice is not recognized, a
            parameter is not numeric, or the PPA term is fractional.
    """
    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)
    deal = Deal.from_dict(data)
    logger.info("Loaded deal %r from %s", deal.name, filepath)
    return deal
