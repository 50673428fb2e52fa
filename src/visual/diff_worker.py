"""Pixel diff worker — compares one screenshot against its baseline image.

Runs as its own process so decoding and comparing large screenshots never
blocks the caller. Protocol: one JSON ``DiffJob`` on stdin, one JSON
``VisualDiff`` line on stdout. Logging goes to stderr.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from PIL import Image, ImageChops, ImageOps

from src.models.visual_diff import DiffJob, VisualDiff

logger = logging.getLogger(__name__)

# Per-channel delta (0-255) below which a pixel difference is treated as
# anti-aliasing or font-rendering noise.
PIXEL_TOLERANCE = 25

DIFF_COLOR = (255, 0, 0)
DIFF_BACKGROUND_FADE = 0.9  # blend factor towards white for the baseline backdrop


def _mismatch_mask(baseline: Image.Image, current: Image.Image) -> Image.Image:
    """Return an "L" mask that is 255 wherever any channel differs beyond tolerance."""
    delta = ImageChops.difference(baseline, current)
    bands = [band.point(lambda v: 255 if v > PIXEL_TOLERANCE else 0) for band in delta.split()]
    mask = bands[0]
    for band in bands[1:]:
        mask = ImageChops.lighter(mask, band)
    return mask


def _render_diff(baseline: Image.Image, mask: Image.Image, diff_path: Path) -> None:
    backdrop = ImageOps.grayscale(baseline).convert("RGB")
    white = Image.new("RGB", backdrop.size, (255, 255, 255))
    canvas = Image.blend(backdrop, white, DIFF_BACKGROUND_FADE)
    canvas.paste(DIFF_COLOR, mask=mask)
    diff_path.parent.mkdir(parents=True, exist_ok=True)
    canvas.save(diff_path)


def compare_images(job: DiffJob) -> VisualDiff:
    """Compare the job's screenshot against its baseline. Never raises."""
    filename = Path(job.screenshot_path).name
    baseline_exists = False

    try:
        if not Path(job.baseline_path).exists():
            logger.debug("No baseline found for %s", filename)
            return VisualDiff(filename=filename)

        baseline_exists = True
        with Image.open(job.baseline_path) as img:
            baseline = img.convert("RGBA")
        with Image.open(job.screenshot_path) as img:
            current = img.convert("RGBA")

        if baseline.size != current.size:
            logger.warning(
                "Image dimensions differ for %s: baseline %dx%d, current %dx%d",
                filename, *baseline.size, *current.size,
            )
            return VisualDiff(
                filename=filename,
                baseline_exists=True,
                diff_percentage=100.0,
                has_significant_change=True,
            )

        mask = _mismatch_mask(baseline, current)
        width, height = baseline.size
        total_pixels = width * height
        mismatched = mask.histogram()[255]
        diff_percentage = mismatched * 100 / total_pixels if total_pixels else 0.0
        significant = diff_percentage > job.threshold

        diff_image_path = None
        if significant:
            diff_path = Path(job.output_dir) / "diffs" / f"diff_{filename}"
            _render_diff(baseline, mask, diff_path)
            diff_image_path = str(diff_path)
            logger.warning("Significant visual change in %s: %.2f%%", filename, diff_percentage)
        else:
            logger.debug("Visual comparison passed for %s: %.2f%%", filename, diff_percentage)

        return VisualDiff(
            filename=filename,
            baseline_exists=True,
            diff_percentage=diff_percentage,
            has_significant_change=significant,
            diff_image_path=diff_image_path,
        )
    except Exception as e:
        logger.error("Error comparing %s against baseline: %s", filename, e)
        return VisualDiff.failed(filename, baseline_exists)


def main() -> int:
    logging.basicConfig(
        level=os.environ.get("UI_VERIFY_WORKER_LOG_LEVEL", "INFO"),
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
    job = DiffJob.model_validate_json(sys.stdin.read())
    diff = compare_images(job)
    sys.stdout.write(diff.model_dump_json() + "\n")
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
