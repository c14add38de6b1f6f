"""
Nepraetor - Entry Point

Analyzes captured point cloud screenshots: counts rendered points, reads the
printed reference count and reports which frames show dummy content.

Example:
    python main.py Screenshots/2024-05-01_10-00-00
    python main.py Screenshots/2024-05-01_10-00-00 --debug --parallel
    python main.py frame_007.png --engine static --reference-text "×12"
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from nepraetor.analysis import AnalysisContext
from nepraetor.batch import BatchProcessor
from nepraetor.export import export_results_csv, format_summary
from nepraetor.ocr import available_engines
from nepraetor.session import Session
from nepraetor.settings import load_settings, save_settings


# Configure logging - output to both console and file
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
    handlers=[
        logging.StreamHandler(),  # Console output
        logging.FileHandler("nepraetor.log", mode='w', encoding='utf-8')  # File output
    ]
)
logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Nepraetor - Point cloud screenshot auditor"
    )
    parser.add_argument(
        "target",
        help="Session folder with frame_NNN.png files, or a single image"
    )
    parser.add_argument(
        "--engine", "-e",
        choices=available_engines(),
        help="OCR engine for the reference count (default: from settings)"
    )
    parser.add_argument(
        "--tesseract-cmd",
        help="Path to the tesseract executable"
    )
    parser.add_argument(
        "--reference-text",
        help="Text returned by the 'static' engine for every view"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Save intermediate images of every stage"
    )
    parser.add_argument(
        "--parallel", "-p",
        action="store_true",
        help="Analyze the three views of a frame in parallel"
    )
    parser.add_argument(
        "--batch-size",
        type=positive_int,
        help="Frames per processing group (default: from settings)"
    )
    parser.add_argument(
        "--output", "-o",
        help="CSV output file (default: results.csv in the session folder)"
    )
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Persist the effective options to config.json"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log per-section details"
    )
    return parser.parse_args(argv)


def effective_settings(settings: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """CLI flags override saved settings."""
    result = dict(settings)
    if args.engine:
        result["ocr_engine"] = args.engine
    if args.tesseract_cmd:
        result["tesseract_cmd"] = args.tesseract_cmd
    if args.debug:
        result["debug_enabled"] = True
    if args.parallel:
        result["parallel_sections"] = True
    if args.batch_size:
        result["batch_size"] = args.batch_size
    return result


def engine_config(settings: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Constructor options for the selected OCR engine."""
    engine_type = settings["ocr_engine"]
    if engine_type == "tesseract" and settings.get("tesseract_cmd"):
        return {"tesseract_cmd": settings["tesseract_cmd"]}
    if engine_type == "static":
        return {"text": args.reference_text or ""}
    return {}


def main(argv: Optional[List[str]] = None) -> int:
    """Run the analysis and export the results."""
    args = parse_args(argv)
    if args.verbose:
        logging.getLogger("nepraetor").setLevel(logging.DEBUG)

    settings = effective_settings(load_settings(), args)
    if args.save_settings:
        save_settings(settings)

    target = Path(args.target)
    if target.is_dir():
        session = Session.open(target)
        paths = session.frame_paths()
        output = Path(args.output) if args.output else session.results_path
        debug_dir = session.debug_dir
    elif target.is_file():
        paths = [target]
        output = Path(args.output) if args.output else None
        debug_dir = target.parent / "debug"
    else:
        logger.error(f"Not found: {target}")
        return 1

    if not paths:
        logger.error(f"No frame_NNN.png files in {target}")
        return 1

    processor = BatchProcessor(
        engine_type=settings["ocr_engine"],
        engine_config=engine_config(settings, args),
        batch_size=settings["batch_size"],
        parallel=settings["parallel_sections"],
        debug_dir=debug_dir if settings["debug_enabled"] else None,
    )

    context = AnalysisContext(
        progress_callback=lambda percent, message: logger.debug(f"{percent * 100:5.1f}% {message}")
    )

    try:
        batch = processor.process(paths, context)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 1

    logger.info(f"Analysis finished in {context.elapsed_time():.1f}s")

    if not batch.results:
        logger.error("No frames could be processed")
        return 1

    if output:
        export_results_csv(batch.results, output)
        print(f"Results exported to: {output}\n")

    print(format_summary(batch.results))

    for failure in batch.failures:
        print(f"{failure.frame_number} -> failed ({failure.error})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
