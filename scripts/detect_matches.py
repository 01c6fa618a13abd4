from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from nccdetect import DetectionError, DetectorConfig, NormXCorrDetector
from nccdetect.config import DEFAULT_MATCH_THRESHOLD
from nccdetect.io import load_grayscale, load_image, save_image
from nccdetect.visualization import annotate_matches


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detect template occurrences with normalized cross-correlation.")
    parser.add_argument("parent", type=Path, help="Image to search.")
    parser.add_argument(
        "--template",
        type=Path,
        required=True,
        help="Image of the sub-region to detect.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--match-threshold",
        type=float,
        default=DEFAULT_MATCH_THRESHOLD,
        help="Minimum correlation that counts as a match (reasonably within [0.5, 1]).",
    )
    mode.add_argument(
        "--best-match",
        action="store_true",
        help="Report only the single best match instead of thresholding.",
    )
    parser.add_argument(
        "--simplify-template",
        action="store_true",
        help="Mask the template down to its single dominant object before matching.",
    )
    parser.add_argument(
        "--object-polarity",
        choices=("bright", "dark"),
        default="bright",
        help="Polarity of the object kept by --simplify-template.",
    )
    parser.add_argument(
        "--absolute-scores",
        action="store_true",
        help="Score anti-correlated peaks by their magnitude instead of their signed value.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Where to write the parent image annotated with the detections.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = DetectorConfig.from_threshold(
        None if args.best_match else args.match_threshold,
        absolute_scores=args.absolute_scores,
        simplify_template=args.simplify_template,
        object_polarity=args.object_polarity,
    )
    parent = load_image(args.parent)
    template = load_grayscale(args.template)

    try:
        result = NormXCorrDetector(config).detect(parent, template)
    except DetectionError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(f"{'#':>3s} | {'x':>6s} {'y':>6s} {'width':>6s} {'height':>6s} | score")
    print("-" * 48)
    for index, (box, score) in enumerate(result, start=1):
        print(f"{index:3d} | {box.x:6d} {box.y:6d} {box.width:6d} {box.height:6d} | {score: .4f}")
    print(f"\nDetections: {len(result)}")

    if args.output is not None:
        written = save_image(args.output, annotate_matches(parent, result))
        print(f"Annotated image: {written}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
