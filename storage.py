"""Flat-file storage for pipeline results.

Successful results are written twice: a timestamped snapshot
(``trends-<epoch-ms>.json``) and ``trends-latest.json``, which the static
presentation layer and the HTTP adapter read back. Failed results are never
stored, so the latest file always holds the last good run.
"""

import json
import logging
import time
from pathlib import Path

from pydantic import ValidationError

from models.trend import TrendResult

logger = logging.getLogger(__name__)

LATEST_FILENAME = "trends-latest.json"


def _snapshot_filename(epoch_ms: int) -> str:
    return f"trends-{epoch_ms}.json"


def _write_json(path: Path, payload: dict) -> None:
    """Write pretty JSON atomically (temp file + rename)."""
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)


def save_result(result: TrendResult, data_dir: Path) -> Path | None:
    """Store a successful result as a snapshot and as the latest file.

    Args:
        result: Pipeline result
        data_dir: Target directory (created if missing)

    Returns:
        Path of the latest file, or None if the result was a failure or
        could not be written
    """
    if not result.success:
        logger.info("Result not stored | reason=failed run error=%s", result.error)
        return None

    payload = result.to_json_dict()
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
        snapshot = data_dir / _snapshot_filename(int(time.time() * 1000))
        _write_json(snapshot, payload)
        latest = data_dir / LATEST_FILENAME
        _write_json(latest, payload)
    except OSError as e:
        logger.error("Result save failed | dir=%s error=%s", data_dir, e, exc_info=True)
        return None

    logger.info("Result saved | snapshot=%s latest=%s trends=%d", snapshot.name, latest, len(result.trends))
    return latest


def load_latest(data_dir: Path) -> TrendResult | None:
    """Read the latest stored result.

    Returns:
        The stored TrendResult, or None if the file is missing or corrupt
    """
    path = data_dir / LATEST_FILENAME
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return TrendResult.from_json_dict(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning("Latest result unreadable | path=%s error=%s", path, e)
        return None
