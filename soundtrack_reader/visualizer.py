"""Debug visualization utilities for waveform extraction."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import cv2
import numpy as np

if TYPE_CHECKING:
    from .detection import RowScan
    from .models import PixelBuffer, Region


class DebugVisualizer:
    """Saves debug images at each step of waveform extraction."""

    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)
        if self.output_dir.exists():
            # Backup existing debug dir before cleaning
            backup_dir = self.output_dir.with_suffix(".bak")
            if backup_dir.exists():
                import shutil

                shutil.rmtree(backup_dir)
            self.output_dir.rename(backup_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.step = 0

    def _save(self, name: str, img: np.ndarray):
        self.step += 1
        filename = f"{self.step:02d}_{name}.png"
        cv2.imwrite(str(self.output_dir / filename), img)

    def _save_figure(self, name: str, fig):
        import matplotlib.pyplot as plt

        fig.tight_layout()
        self.step += 1
        fig.savefig(self.output_dir / f"{self.step:02d}_{name}.png", dpi=100)
        plt.close(fig)

    @staticmethod
    def _to_uint8(gray: np.ndarray) -> np.ndarray:
        return np.clip(gray, 0, 255).astype(np.uint8)

    def save_region(self, pixels: PixelBuffer, region: Region):
        """Save the source image with the selected region outlined."""
        vis = pixels.to_bgr()
        x, y, width, height = region.as_tuple()
        thickness = max(2, min(vis.shape[:2]) // 300)
        cv2.rectangle(vis, (x, y), (x + width - 1, y + height - 1), (0, 255, 255), thickness)
        self._save("region", vis)

    def save_grayscale(self, gray: np.ndarray, stretched: np.ndarray, blurred: np.ndarray):
        """Save luminance, contrast-stretched and blurred fields side by side."""
        import matplotlib.pyplot as plt

        fig, axes = plt.subplots(1, 3, figsize=(12, 6))
        for ax, field, title in zip(
            axes,
            (gray, stretched, blurred),
            ("Luminance", "Contrast stretched", "Box blur"),
        ):
            ax.imshow(field, cmap="gray", vmin=0, vmax=255, aspect="auto")
            ax.set_title(title)
            ax.axis("off")

        self._save_figure("grayscale", fig)

    def save_histogram(self, histogram: np.ndarray, threshold: int):
        """Save the brightness histogram with the selected threshold."""
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots(figsize=(8, 3))
        ax.fill_between(range(256), histogram, alpha=0.7)
        ax.axvline(x=threshold, color="red", linestyle="--", label=f"threshold={threshold}")
        ax.set_xlabel("Brightness")
        ax.set_ylabel("Count")
        ax.set_xlim(0, 255)
        ax.set_title("Histogram (blurred)")
        ax.legend()

        self._save_figure("histogram", fig)

    def save_row_edges(self, blurred: np.ndarray, threshold: int, scans: list[RowScan]):
        """Save the binarized region with detected band edges per row.

        Light bands are marked green, dark bands blue and fallback rows red.
        """
        from .detection import EdgePolarity

        binary = ((blurred > threshold).astype(np.uint8)) * 255
        vis = cv2.cvtColor(binary, cv2.COLOR_GRAY2BGR)
        overlay = vis.copy()

        for y, scan in enumerate(scans):
            if scan.is_fallback:
                overlay[y, :] = (0, 0, 255)
                continue
            color = (0, 200, 0) if scan.polarity == EdgePolarity.LIGHT else (255, 0, 0)
            overlay[y, scan.left : scan.right] = color

        cv2.addWeighted(overlay, 0.5, vis, 0.5, 0, vis)
        self._save("row_edges", vis)

    def save_waveform(self, raw: np.ndarray, final: np.ndarray | None = None):
        """Save raw per-row amplitudes and, when available, the final waveform."""
        import matplotlib.pyplot as plt

        rows = 2 if final is not None else 1
        fig, axes = plt.subplots(rows, 1, figsize=(10, 3 * rows), squeeze=False)

        axes[0, 0].plot(raw, color="gray")
        axes[0, 0].set_title(f"Raw amplitude (std={np.std(raw):.4f})")
        axes[0, 0].set_xlim(0, len(raw) - 1)
        axes[0, 0].set_ylabel("Band ratio")

        if final is not None:
            axes[1, 0].plot(final, color="green")
            axes[1, 0].axhline(y=0, color="black", linewidth=0.5)
            axes[1, 0].set_title("Waveform (normalized, DC removed, smoothed)")
            axes[1, 0].set_xlim(0, len(final) - 1)
            axes[1, 0].set_ylim(-1.05, 1.05)
            axes[1, 0].set_xlabel("Row")

        self._save_figure("waveform", fig)
