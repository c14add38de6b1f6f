"""
Debug Artifact Writer

Saves the intermediate images of a frame analysis as PNG files named
frame_<NNN>_<stage tag>.png. Purely diagnostic; nothing reads them back.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Union

import cv2
import numpy as np
from PIL import Image

from .analysis.result import DebugArtifact

logger = logging.getLogger(__name__)


# Default debug output location
DEBUG_DIR = Path("./debug")


def artifact_filename(frame_number: int, tag: str) -> str:
    """File name for one artifact, e.g. frame_007_6_side_mask.png."""
    return f"frame_{frame_number:03d}_{tag}.png"


def to_pil_image(image: np.ndarray) -> Image.Image:
    """Convert a BGR or single channel OpenCV image to PIL."""
    if image.ndim == 2:
        return Image.fromarray(image)
    return Image.fromarray(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))


class DebugArtifactWriter:
    """Writes debug artifacts into a directory."""

    def __init__(self, debug_dir: Union[str, Path] = DEBUG_DIR):
        self.debug_dir = Path(debug_dir)

    def write(self, frame_number: int, artifacts: Iterable[DebugArtifact]) -> List[Path]:
        """
        Save artifacts for one frame.

        Images that cannot be written are logged and skipped.

        Args:
            frame_number: Frame the artifacts belong to
            artifacts: Artifacts in stage order

        Returns:
            Paths of the files written
        """
        self.debug_dir.mkdir(parents=True, exist_ok=True)

        written = []
        for artifact in artifacts:
            if artifact.image.size == 0:
                continue
            path = self.debug_dir / artifact_filename(frame_number, artifact.tag)
            try:
                to_pil_image(artifact.image).save(path, "PNG")
            except OSError as e:
                logger.warning(f"Failed to save debug image {path}: {e}")
                continue
            written.append(path)

        logger.debug(f"Frame {frame_number:03d}: {len(written)} debug images saved to {self.debug_dir}")
        return written
