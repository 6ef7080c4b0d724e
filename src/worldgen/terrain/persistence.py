"""Snapshot persistence: save and load generated worlds."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import numpy as np

from ..snapshot import WorldSnapshot
from ..types import SettlementSite

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

_GRIDS = ("heights", "moisture", "temperature", "biomes", "colors")


def save_snapshot(path: Path, snapshot: WorldSnapshot) -> None:
    """Save a snapshot to disk.

    Uses numpy's compressed .npz format; grids are stored as arrays and
    everything else as a JSON metadata blob.

    Args:
        path: Output path (should end with .npz).
        snapshot: Snapshot to save.
    """
    settlements_data = [
        {"x": site.x, "y": site.y, "radius": site.radius}
        for site in snapshot.settlements
    ]

    metadata = {
        "version": FORMAT_VERSION,
        "seed": snapshot.seed,
        "width": snapshot.width,
        "height": snapshot.height,
        "segment_x": snapshot.segment_x,
        "segment_y": snapshot.segment_y,
        "parent_width": snapshot.parent_width,
        "parent_height": snapshot.parent_height,
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }

    np.savez_compressed(
        path,
        heights=snapshot.heights,
        moisture=snapshot.moisture,
        temperature=snapshot.temperature,
        biomes=snapshot.biomes,
        colors=snapshot.colors,
        settlements=json.dumps(settlements_data).encode("utf-8"),
        metadata=json.dumps(metadata).encode("utf-8"),
    )

    file_size = path.stat().st_size / (1024 * 1024)
    logger.info(f"Saved snapshot to {path} ({file_size:.1f} MB)")


def load_snapshot(path: Path) -> WorldSnapshot:
    """Load a snapshot from disk.

    Args:
        path: Path to .npz file.

    Returns:
        The saved WorldSnapshot.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ValueError: If file format is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    with np.load(path) as data:
        missing = [name for name in _GRIDS if name not in data]
        if missing:
            raise ValueError(f"Invalid snapshot file: missing {', '.join(missing)}")
        grids = {name: data[name] for name in _GRIDS}

        if "settlements" in data:
            settlements_data = json.loads(data["settlements"].tobytes().decode("utf-8"))
        else:
            settlements_data = []

        if "metadata" in data:
            metadata = json.loads(data["metadata"].tobytes().decode("utf-8"))
        else:
            metadata = {}

    version = metadata.get("version", FORMAT_VERSION)
    if version > FORMAT_VERSION:
        raise ValueError(f"Unsupported snapshot version: {version}")

    snapshot = WorldSnapshot(
        **grids,
        seed=metadata.get("seed", 0),
        settlements=[SettlementSite(**site) for site in settlements_data],
        segment_x=metadata.get("segment_x", 0),
        segment_y=metadata.get("segment_y", 0),
        parent_width=metadata.get("parent_width"),
        parent_height=metadata.get("parent_height"),
    )

    logger.info(f"Loaded snapshot from {path}: {snapshot.width}x{snapshot.height}")
    return snapshot
