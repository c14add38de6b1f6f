"""
Session Module - Capture session folders and their frame files.

A session is one timestamped folder holding frame_001.png, frame_002.png, ...
plus the exported results and debug images. The session is passed explicitly
to whatever needs it; there is no process-wide "current session".
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from .analysis.frame import frame_number_from_path

logger = logging.getLogger(__name__)


SESSION_NAME_FORMAT = "%Y-%m-%d_%H-%M-%S"
RESULTS_FILE = "results.csv"
DEBUG_SUBDIR = "debug"


@dataclass(frozen=True)
class Session:
    """
    A folder of captured frames.

    Attributes:
        folder: Session directory
    """
    folder: Path

    @classmethod
    def create(cls, screenshots_dir: Union[str, Path],
               now: Optional[datetime] = None) -> 'Session':
        """
        Create a new timestamped session folder.

        Args:
            screenshots_dir: Parent directory for all sessions
            now: Timestamp to name the folder after (defaults to now)

        Returns:
            Session for the new folder
        """
        stamp = (now or datetime.now()).strftime(SESSION_NAME_FORMAT)
        folder = Path(screenshots_dir) / stamp
        folder.mkdir(parents=True, exist_ok=True)
        logger.info(f"Session folder: {folder}")
        return cls(folder=folder)

    @classmethod
    def open(cls, folder: Union[str, Path]) -> 'Session':
        """Use an existing folder as session."""
        return cls(folder=Path(folder))

    @property
    def results_path(self) -> Path:
        return self.folder / RESULTS_FILE

    @property
    def debug_dir(self) -> Path:
        return self.folder / DEBUG_SUBDIR

    def frame_path(self, frame_number: int) -> Path:
        """Path of a frame file, e.g. frame_007.png."""
        return self.folder / f"frame_{frame_number:03d}.png"

    def frame_paths(self) -> List[Path]:
        """
        Existing frame files sorted by frame number.

        Files not following the frame_NNN.png convention are ignored.
        """
        if not self.folder.is_dir():
            return []
        numbered = [
            (frame_number_from_path(path), path)
            for path in self.folder.glob("frame_*.png")
        ]
        return [path for number, path in sorted(
            (item for item in numbered if item[0] is not None),
            key=lambda item: item[0],
        )]

    def next_frame_number(self) -> int:
        """Frame number following the highest existing frame (1 for an empty session)."""
        numbers = [frame_number_from_path(path) for path in self.frame_paths()]
        return max(numbers, default=0) + 1
