"""
Frame Module - Decoded screenshots and their three view sections.

A captured screenshot stacks three renders of the same point cloud
vertically: overhead on top, side in the middle, back at the bottom.
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError


# Frame files are named frame_001.png, frame_002.png, ...
FRAME_NAME_PATTERN = re.compile(r"^frame_(\d+)$")


class FrameLoadError(Exception):
    """Raised when a frame file is missing or cannot be decoded."""


class Section(Enum):
    """The three stacked views of a screenshot, top to bottom."""
    OVERHEAD = "Overhead"
    SIDE = "Side"
    BACK = "Back"

    @property
    def index(self) -> int:
        """Vertical position of the band (0 = top)."""
        return _SECTION_ORDER.index(self)

    @property
    def tag(self) -> str:
        """Lowercase name used in debug artifact tags."""
        return self.value.lower()


_SECTION_ORDER = list(Section)


@dataclass(frozen=True, eq=False)
class Frame:
    """
    Immutable decoded screenshot.

    Attributes:
        image: BGR pixel buffer (height x width x 3, uint8)
        frame_number: Label used for reporting and debug file names
    """
    image: np.ndarray
    frame_number: int = 0

    def __post_init__(self):
        # Pixels are frozen too; the caller's array is copied, not locked
        image = np.asarray(self.image)
        if image.flags.writeable:
            image = image.copy()
            image.flags.writeable = False
        object.__setattr__(self, "image", image)

    @classmethod
    def from_image(cls, image: Image.Image, frame_number: int = 0) -> 'Frame':
        """
        Create a Frame from a PIL image.

        Args:
            image: PIL Image in any mode
            frame_number: Frame label

        Returns:
            Frame holding a BGR copy of the pixels
        """
        rgb = np.array(image.convert("RGB"))
        return cls(image=cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR), frame_number=frame_number)

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    @property
    def section_height(self) -> int:
        """Height of each view band; remainder rows belong to no section."""
        return self.height // 3


@dataclass(frozen=True, eq=False)
class SectionSlice:
    """
    One view band of a frame.

    Attributes:
        section: Which view this band shows
        image: Read-only BGR view of the frame rows belonging to the band
        offset: First frame row of the band
    """
    section: Section
    image: np.ndarray
    offset: int

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])


def split_sections(frame: Frame) -> List[SectionSlice]:
    """
    Split a frame into its three equal horizontal bands.

    Rows left over by the integer division are ignored.

    Args:
        frame: Frame to split

    Returns:
        Overhead, Side and Back slices in that order
    """
    height = frame.section_height
    slices = []
    for section in Section:
        offset = section.index * height
        slices.append(SectionSlice(
            section=section,
            image=frame.image[offset:offset + height, :],
            offset=offset,
        ))
    return slices


def frame_number_from_path(path: Union[str, Path]) -> Optional[int]:
    """
    Parse the frame number out of a "frame_NNN.ext" file name.

    Returns:
        Frame number, or None if the name does not follow the convention
    """
    match = FRAME_NAME_PATTERN.match(Path(path).stem)
    if not match:
        return None
    return int(match.group(1))


def load_frame(path: Union[str, Path], frame_number: Optional[int] = None) -> Frame:
    """
    Decode an image file into a Frame.

    Args:
        path: Image file in any format PIL understands
        frame_number: Frame label. Parsed from the file name if None,
                      falling back to 0.

    Returns:
        Decoded Frame

    Raises:
        FrameLoadError: If the file is missing or not a decodable image
    """
    path = Path(path)
    if frame_number is None:
        frame_number = frame_number_from_path(path) or 0

    if not path.is_file():
        raise FrameLoadError(f"Frame file not found: {path}")

    try:
        with Image.open(path) as image:
            return Frame.from_image(image, frame_number=frame_number)
    except (UnidentifiedImageError, OSError) as e:
        raise FrameLoadError(f"Cannot decode frame {path}: {e}") from e
