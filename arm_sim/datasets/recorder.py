"""
In-memory telemetry recording with on-disk export.

Provides a ``TelemetryRecorder`` sink that keeps every frame published by
the controller, exposes each field as a NumPy time series, and flushes the
run to disk as compressed ``.npz`` archives plus a ``meta.json`` index.

Classes:
    TelemetryRecorder: Recording telemetry sink.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

import numpy as np

from arm_sim.visualization.telemetry import TelemetrySink


@dataclass
class TelemetryRecorder(TelemetrySink):
    """Records every published telemetry frame.

    Attributes:
        output_dir: Root directory written by ``save``.
        run_name: Human-readable name included in ``meta.json``.
        fps: Publishing rate (informational, written to metadata).
        save_on_close: Flush to disk when the sink is closed.
        frames: Recorded frames, keyed by composite name.
    """

    output_dir: str = "./recorded_telemetry"
    run_name: str = "arm_sim_run"
    fps: int = 50
    save_on_close: bool = False
    frames: Dict[str, List[Dict[str, float]]] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # TelemetrySink
    # ------------------------------------------------------------------

    def publish(self, name: str, values: Mapping[str, float]) -> None:
        """Append one frame for composite *name*."""
        self.frames.setdefault(name, []).append({k: float(v) for k, v in values.items()})

    def close(self) -> None:
        """Flush to disk if ``save_on_close`` is set and anything was recorded."""
        if self.save_on_close and self.frames:
            self.save()

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def num_frames(self, name: str) -> int:
        """Number of frames recorded for *name*."""
        return len(self.frames.get(name, []))

    def series(self, name: str, key: str) -> np.ndarray:
        """Return field *key* of composite *name* as a 1-D array.

        Frames that lack *key* are skipped.

        Args:
            name: Composite name.
            key: Field name.

        Returns:
            Float64 array in publication order.
        """
        return np.array(
            [frame[key] for frame in self.frames.get(name, []) if key in frame],
            dtype=np.float64,
        )

    def latest(self, name: str) -> Dict[str, float]:
        """Return the most recent frame for *name* (empty if none)."""
        recorded = self.frames.get(name)
        return dict(recorded[-1]) if recorded else {}

    def clear(self) -> None:
        """Drop every recorded frame."""
        self.frames.clear()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    @staticmethod
    def _file_stem(name: str) -> str:
        """Return a filesystem-safe stem for a composite name.

        Args:
            name: Composite name such as ``'Arm Sim'``.

        Returns:
            String such as ``'arm_sim'``.
        """
        return re.sub(r"[^0-9a-zA-Z]+", "_", name).strip("_").lower() or "telemetry"

    def _save_composite(self, out_dir: Path, name: str) -> Dict[str, Any]:
        keys = sorted({k for frame in self.frames[name] for k in frame})
        arrays = {k: self.series(name, k) for k in keys}
        filename = f"{self._file_stem(name)}.npz"
        np.savez_compressed(out_dir / filename, **arrays)
        return {"name": name, "num_frames": self.num_frames(name), "fields": keys, "data_path": filename}

    def save(self) -> Path:
        """Write one ``.npz`` per composite and a ``meta.json`` index.

        Returns:
            ``Path`` to the written metadata file.
        """
        out_dir = Path(self.output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        composites = [self._save_composite(out_dir, name) for name in self.frames]
        meta = {
            "run_name": self.run_name,
            "fps": self.fps,
            "composites": composites,
        }
        path = out_dir / "meta.json"
        path.write_text(json.dumps(meta, indent=2))
        return path
