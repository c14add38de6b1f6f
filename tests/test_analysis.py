"""
Test script for the analysis stages

Covers each stage of the pipeline in isolation:
1. Section splitting
2. Canvas region detection
3. Point mask and point counting
4. Outlier-robust count aggregation
5. Per-digit reference consensus
6. Dummy classification

Usage:
    python tests/test_analysis.py
    pytest tests/test_analysis.py
"""

import sys
from pathlib import Path

import numpy as np

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from nepraetor.analysis import (
    Decision,
    DetectedRegion,
    Frame,
    Section,
    aggregate_counts,
    build_consensus,
    build_point_mask,
    classify_frame,
    coefficient_of_variation,
    count_points,
    detect_region,
    split_sections,
)
from nepraetor.analysis.classifier import relative_difference
from nepraetor.analysis.points import count_mask_points, count_point_areas


DARK = (40, 40, 40)
WHITE = (255, 255, 255)
RED = (0, 0, 255)          # BGR
HOT_PINK = (180, 105, 255)  # BGR, hue ~165 in OpenCV scale
BLUE = (255, 0, 0)


def blank(height: int, width: int, color=DARK) -> np.ndarray:
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :] = color
    return image


def test_split_sections():
    """Three equal bands, remainder rows ignored."""
    print("\n" + "="*60)
    print("TEST: Section splitting")
    print("="*60)

    image = blank(302, 10)
    image[300:, :] = RED  # remainder rows
    frame = Frame(image=image, frame_number=7)

    slices = split_sections(frame)
    print(f"  Frame: {frame.width}x{frame.height}, section height {frame.section_height}")

    assert [s.section for s in slices] == [Section.OVERHEAD, Section.SIDE, Section.BACK]
    assert [s.offset for s in slices] == [0, 100, 200]
    assert all(s.height == 100 and s.width == 10 for s in slices)
    # No section reaches the remainder rows
    assert all(not (s.image == np.array(RED, dtype=np.uint8)).all(axis=2).any() for s in slices)

    assert Section.SIDE.index == 1
    assert Section.BACK.tag == "back"

    print("  [PASS] Section splitting tests")


def test_detect_region():
    """Largest bright box above a quarter of the band is found."""
    print("\n" + "="*60)
    print("TEST: Region detection")
    print("="*60)

    section = blank(100, 300)
    section[10:80, 40:260] = WHITE
    # Red points inside the canvas must not split it
    section[30:32, 60:62] = RED
    region = detect_region(section)
    print(f"  Canvas region: {region}")
    assert region == DetectedRegion(x=40, y=10, width=220, height=70)
    assert region.area == 220 * 70
    assert region.crop(section).shape == (70, 220, 3)

    # Two candidates: the larger wins
    section = blank(100, 300)
    section[5:40, 10:110] = WHITE
    section[50:95, 150:290] = WHITE
    assert detect_region(section) == DetectedRegion(x=150, y=50, width=140, height=45)

    # Too small: width 50 <= 300 // 4
    section = blank(100, 300)
    section[10:80, 10:60] = WHITE
    assert detect_region(section) is None

    # Nothing bright, or nothing at all
    assert detect_region(blank(100, 300)) is None
    assert detect_region(np.zeros((0, 300, 3), dtype=np.uint8)) is None

    print("  [PASS] Region detection tests")


def test_point_mask():
    """Red and pink pixels are masked, other colors are not."""
    print("\n" + "="*60)
    print("TEST: Point mask")
    print("="*60)

    roi = blank(20, 20, WHITE)
    roi[2, 2] = RED
    roi[2, 10] = HOT_PINK
    roi[10, 2] = BLUE
    roi[10, 10] = (128, 128, 128)

    mask = build_point_mask(roi)
    print(f"  Masked pixels: {int((mask > 0).sum())}")
    assert mask.shape == (20, 20)
    assert mask[2, 2] == 255
    assert mask[2, 10] == 255
    assert mask[10, 2] == 0
    assert mask[10, 10] == 0
    assert count_points(roi) == 2

    print("  [PASS] Point mask tests")


def test_point_counting():
    """Only blobs of 1-25 pixels count as points."""
    print("\n" + "="*60)
    print("TEST: Point counting")
    print("="*60)

    mask = np.zeros((40, 60), dtype=np.uint8)
    mask[2, 2:7] = 255         # area 5
    mask[10:12, 2:7] = 255     # area 10
    mask[20:25, 2:8] = 255     # area 30
    mask[2, 30] = 255          # area 1
    mask[30:35, 30:35] = 255   # area 25

    count = count_mask_points(mask)
    print(f"  Counted {count} points")
    assert count == 4

    # Degenerate sub-pixel blob is not a point either
    assert count_point_areas([5, 10, 30, 0.5]) == 2
    assert count_mask_points(np.zeros((0, 0), dtype=np.uint8)) == 0
    assert count_points(np.zeros((0, 10, 3), dtype=np.uint8)) == 0

    # Diagonal neighbours are one component (8-connectivity)
    mask = np.zeros((10, 10), dtype=np.uint8)
    mask[1, 1] = 255
    mask[2, 2] = 255
    assert count_mask_points(mask) == 1

    print("  [PASS] Point counting tests")


def test_aggregate_counts():
    """Mean of the counts within one standard deviation."""
    print("\n" + "="*60)
    print("TEST: Count aggregation")
    print("="*60)

    assert aggregate_counts([10, 10, 10]) == 10
    assert aggregate_counts([0, 0, 0]) == 0
    # 40 is an outlier, mean of 10 and 12
    assert aggregate_counts([10, 12, 40]) == 11
    # Truncated: mean of 10 and 11 is 10.5
    assert aggregate_counts([10, 11, 40]) == 10
    assert aggregate_counts([2, 10, 18]) == 10
    assert aggregate_counts([]) == 0

    assert coefficient_of_variation([10, 10, 10]) == 0.0
    assert coefficient_of_variation([0, 0, 0]) == 0.0
    assert abs(coefficient_of_variation([9, 10, 11]) - 0.0816) < 1e-3
    assert coefficient_of_variation([2, 10, 18]) > 0.3

    print("  [PASS] Count aggregation tests")


def test_build_consensus():
    """Per-digit majority vote across the readings."""
    print("\n" + "="*60)
    print("TEST: Digit consensus")
    print("="*60)

    cases = [
        ([1368, 1368, 1358], 1368),
        ([368, 1368, 1367], 1368),
        ([368, 368, 1368], 368),
        ([0, 1368, 0], 1368),
        ([0, 0, 0], 0),
        ([], 0),
        ([12, 13], 12),           # tie goes to the smaller digit
        ([20, 20, 20], 20),       # trailing zeros survive
        ([1000, 1000, 1000], 1000),
        ([10, 5, 5], 5),
        ([1368, 1268, 1358], 1368),
    ]
    for readings, expected in cases:
        result = build_consensus(readings)
        print(f"  {readings} -> {result}")
        assert result == expected, f"{readings}: expected {expected}, got {result}"

    print("  [PASS] Digit consensus tests")


def test_classify_frame():
    """Threshold, consistency and tolerance rules in order."""
    print("\n" + "="*60)
    print("TEST: Dummy classification")
    print("="*60)

    # Above the detection threshold the reference is trusted outright
    c = classify_frame(3, 1368, [2, 10, 18])
    assert not c.is_dummy and c.points == 1368
    assert c.decision == Decision.REFERENCE_ABOVE_THRESHOLD
    assert classify_frame(0, 21).points == 21

    # Consistent views matching the reference
    c = classify_frame(10, 10, [9, 10, 11])
    assert not c.is_dummy and c.points == 10
    assert c.decision == Decision.REFERENCE_MATCH

    # Inconsistent views
    c = classify_frame(10, 10, [2, 10, 18])
    assert c.is_dummy and c.decision == Decision.INCONSISTENT_VIEWS

    # Consistent views, wrong count
    c = classify_frame(15, 10, [15, 15, 15])
    assert c.is_dummy and c.points == 15
    assert c.decision == Decision.REFERENCE_MISMATCH

    # Exactly at the tolerance and at the threshold
    assert not classify_frame(11, 10, [11, 11, 11]).is_dummy
    assert classify_frame(20, 20, [20, 20, 20]).decision == Decision.REFERENCE_MATCH

    # No reference read
    assert classify_frame(5, 0, [5, 5, 5]).is_dummy
    assert not classify_frame(0, 0, [0, 0, 0]).is_dummy

    assert relative_difference(9, 10) == 0.1
    assert relative_difference(3, 0) == float("inf")

    print("  [PASS] Dummy classification tests")


def main():
    """Run all tests."""
    print("\n" + "#"*60)
    print("# ANALYSIS STAGE TESTS")
    print("#"*60)

    tests = [
        ("Section splitting", test_split_sections),
        ("Region detection", test_detect_region),
        ("Point mask", test_point_mask),
        ("Point counting", test_point_counting),
        ("Count aggregation", test_aggregate_counts),
        ("Digit consensus", test_build_consensus),
        ("Dummy classification", test_classify_frame),
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
