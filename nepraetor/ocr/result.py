"""
OCR Result Dataclasses

Shared data structures for OCR engine results.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class OCRResult:
    """Text recognized in a single image crop."""
    text: str                  # Raw recognized text (may be empty)
    processing_time_ms: float  # Time taken
    engine: str = ""           # Name of the engine that produced the text

    @property
    def is_empty(self) -> bool:
        """True if the engine recognized nothing."""
        return not self.text.strip()
