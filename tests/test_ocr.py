"""
Test script for reference number recognition.

Covers the OCR engine registry, label cropping and the parsing of
recognized text. No tesseract binary is needed: engines are replaced
by fixed-text or failing stand-ins.

Usage:
    python tests/test_ocr.py
    pytest tests/test_ocr.py
"""

import sys
from pathlib import Path

import numpy as np
from PIL import Image

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from nepraetor.ocr import (
    OCREngine,
    OCRResult,
    StaticOCREngine,
    available_engines,
    create_engine,
    register_engine,
)
from nepraetor.analysis import ReferenceRecognizer, parse_reference_text
from nepraetor.analysis.reference import prepare_for_ocr, reference_crop


class FailingEngine(OCREngine):
    """Engine that always raises, like a backend whose model failed to load."""

    @property
    def name(self) -> str:
        return "failing"

    def process(self, image: Image.Image) -> OCRResult:
        raise RuntimeError("model not loaded")


class RecordingEngine(OCREngine):
    """Engine that remembers the images it was given."""

    def __init__(self, text: str = ""):
        self.text = text
        self.images = []

    @property
    def name(self) -> str:
        return "recording"

    def process(self, image: Image.Image) -> OCRResult:
        self.images.append(image)
        return OCRResult(text=self.text, processing_time_ms=0.0, engine=self.name)


def test_parse_reference_text():
    """Digits are kept, everything else is noise."""
    print("\n" + "="*60)
    print("TEST: Reference text parsing")
    print("="*60)

    cases = [
        ("×1368", 1368),
        ("x 1,368\n", 1368),
        ("  42 ", 42),
        ("007", 7),
        ("×", 0),
        ("", 0),
        (None, 0),
        ("no digits here", 0),
    ]
    for text, expected in cases:
        value = parse_reference_text(text)
        print(f"  {text!r} -> {value}")
        assert value == expected

    print("  [PASS] Reference text parsing tests")


def test_reference_crop():
    """Label crop sits at the bottom left and is clipped to the section."""
    print("\n" + "="*60)
    print("TEST: Reference crop")
    print("="*60)

    section = np.zeros((100, 300, 3), dtype=np.uint8)
    section[70:95, 10:110] = 255
    crop = reference_crop(section)
    print(f"  Crop shape: {crop.shape}")
    assert crop.shape == (25, 100, 3)
    assert (crop == 255).all()

    # Small section: clipped, never out of bounds
    assert reference_crop(np.zeros((20, 50, 3), dtype=np.uint8)).shape == (20, 40, 3)
    assert reference_crop(np.zeros((20, 5, 3), dtype=np.uint8)).size == 0

    prepared = prepare_for_ocr(crop)
    assert prepared.shape == (50, 200)
    assert set(np.unique(prepared)) <= {0, 255}

    print("  [PASS] Reference crop tests")


def test_reference_recognizer():
    """Recognizer hands a prepared crop to the engine and parses the answer."""
    print("\n" + "="*60)
    print("TEST: Reference recognizer")
    print("="*60)

    section = np.zeros((100, 300, 3), dtype=np.uint8)

    engine = RecordingEngine("×1368")
    reading = ReferenceRecognizer(engine).read(section, label="Overhead")
    assert reading.value == 1368
    assert reading.text == "×1368"
    assert engine.images[0].size == (200, 50)  # upscaled 2x
    assert reading.crop.shape == (25, 100, 3)
    assert reading.prepared.shape == (50, 200)

    engine = RecordingEngine("×12")
    reading = ReferenceRecognizer(engine, preprocess=False).read(section)
    assert reading.value == 12
    assert engine.images[0].size == (100, 25)
    assert engine.images[0].mode == "RGB"
    assert reading.prepared is reading.crop

    # Engine errors become a 0 reading
    reading = ReferenceRecognizer(FailingEngine()).read(section, label="Side")
    assert reading.value == 0 and reading.text == ""

    # Nothing recognized
    assert ReferenceRecognizer(StaticOCREngine("")).read_value(section) == 0

    # Section too small for a label: the engine is not called
    engine = RecordingEngine("×5")
    assert ReferenceRecognizer(engine).read_value(np.zeros((20, 5, 3), dtype=np.uint8)) == 0
    assert engine.images == []

    print("  [PASS] Reference recognizer tests")


def test_engine_factory():
    """Registry creates, lists and registers engines."""
    print("\n" + "="*60)
    print("TEST: Engine factory")
    print("="*60)

    engines = available_engines()
    print(f"  Available engines: {engines}")
    assert "tesseract" in engines
    assert "static" in engines

    engine = create_engine("static", text="×5")
    result = engine.process(Image.new("L", (10, 10)))
    assert engine.name == "static"
    assert result.text == "×5"
    assert not result.is_empty

    engine.configure(text="")
    assert engine.process(Image.new("L", (10, 10))).is_empty

    tesseract = create_engine("tesseract", psm=8)
    assert tesseract.name == "tesseract"
    assert "--psm 8" in tesseract.config
    assert "tessedit_char_whitelist=×0123456789" in tesseract.config

    try:
        create_engine("does-not-exist")
        assert False, "expected ValueError"
    except ValueError as e:
        assert "Available" in str(e)

    register_engine("recording", RecordingEngine)
    assert "recording" in available_engines()
    assert create_engine("recording", text="1").process(Image.new("L", (1, 1))).text == "1"

    try:
        register_engine("bogus", dict)
        assert False, "expected TypeError"
    except TypeError:
        pass

    print("  [PASS] Engine factory tests")


def main():
    """Run all tests."""
    print("\n" + "#"*60)
    print("# OCR TESTS")
    print("#"*60)

    tests = [
        ("Reference text parsing", test_parse_reference_text),
        ("Reference crop", test_reference_crop),
        ("Reference recognizer", test_reference_recognizer),
        ("Engine factory", test_engine_factory),
    ]

    results = []
    for name, test in tests:
        try:
            test()
            results.append((name, True))
        except AssertionError as e:
            print(f"  [FAIL] {e}")
            results.append((name, False))

    print("\n" + "="*60)
    print("SUMMARY")
    print("="*60)

    all_passed = True
    for name, passed in results:
        status = "PASS" if passed else "FAIL"
        print(f"  {name}: [{status}]")
        if not passed:
            all_passed = False

    print()
    if all_passed:
        print("All tests PASSED!")
        return 0
    else:
        print("Some tests FAILED!")
        return 1


if __name__ == "__main__":
    sys.exit(main())
