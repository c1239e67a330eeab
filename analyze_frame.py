#!/usr/bin/env python3
"""
Extract color statistics from a region of a video frame.

Outputs RGB/HSV statistics for the sampled region. Use multiple calls with
different regions to build a color profile before tuning a preset, e.g.:

    python analyze_frame.py /tmp/frame.png 400,200,600,350 skin
    python analyze_frame.py /tmp/frame.png 350,400,550,600 pants --json

Standalone tool: it shares nothing with the LUT engine.
"""

import argparse
import colorsys
import logging
import sys
from typing import List, Optional

import numpy as np
from PIL import Image
from pydantic import BaseModel, Field
from rich.panel import Panel
from rich.table import Table

from constants import Region
from rich_console import console, print_error, setup_rich_logging

logger = logging.getLogger(__name__)


class ChannelRange(BaseModel):
    min: float
    max: float
    std: Optional[float] = None


class RegionStats(BaseModel):
    """Color statistics for one rectangular region of an image."""
    label: str
    region: List[int] = Field(description="[x1, y1, x2, y2] in pixels")
    pixel_count: int
    avg_rgb: dict = Field(description="Mean 8-bit R, G, B")
    avg_hsv: dict = Field(description="HSV of the mean color (h in degrees)")
    h_range: ChannelRange
    s_range: ChannelRange
    v_range: ChannelRange


def parse_region(text: str) -> Region:
    """
    Parse 'x1,y1,x2,y2' into a region tuple.

    Raises:
        ValueError: Wrong number of values or an empty rectangle
    """
    try:
        x1, y1, x2, y2 = (int(part) for part in text.split(","))
    except ValueError:
        raise ValueError(f"Region must be x1,y1,x2,y2 integers, got '{text}'") from None
    if x2 <= x1 or y2 <= y1:
        raise ValueError(f"Region is empty: {text}")
    return x1, y1, x2, y2


def region_stats(pixels: np.ndarray, region: Region, label: str = "sample") -> RegionStats:
    """
    Compute statistics for an (N, 3) array of 8-bit RGB pixels.

    Args:
        pixels: Pixel values, one row per pixel
        region: Rectangle the pixels came from (reported back)
        label: Name for the sample
    """
    if len(pixels) == 0:
        raise ValueError("Region contains no pixels")

    rgb = pixels.astype(np.float64)
    avg_r, avg_g, avg_b = rgb.mean(axis=0)
    h, s, v = colorsys.rgb_to_hsv(avg_r / 255.0, avg_g / 255.0, avg_b / 255.0)

    hsv = np.array([colorsys.rgb_to_hsv(*(p / 255.0)) for p in rgb])
    h_vals = hsv[:, 0] * 360.0
    s_vals = hsv[:, 1]
    v_vals = hsv[:, 2]

    # Spread around the hue of the mean color, not a circular std
    h_std = float(np.sqrt(np.mean((h_vals - h * 360.0) ** 2)))

    return RegionStats(
        label=label,
        region=list(region),
        pixel_count=int(len(rgb)),
        avg_rgb={"r": round(float(avg_r), 1), "g": round(float(avg_g), 1), "b": round(float(avg_b), 1)},
        avg_hsv={"h": round(h * 360.0, 1), "s": round(s, 3), "v": round(v, 3)},
        h_range=ChannelRange(min=round(float(h_vals.min()), 1), max=round(float(h_vals.max()), 1),
                             std=round(h_std, 1)),
        s_range=ChannelRange(min=round(float(s_vals.min()), 3), max=round(float(s_vals.max()), 3)),
        v_range=ChannelRange(min=round(float(v_vals.min()), 3), max=round(float(v_vals.max()), 3)),
    )


def analyze_image(image_path: str, region: Region, label: str = "sample") -> RegionStats:
    """Crop a region from an image file and compute its statistics."""
    with Image.open(image_path) as img:
        crop = img.convert("RGB").crop(region)
        pixels = np.asarray(crop, dtype=np.uint8).reshape(-1, 3)
    logger.debug(f"Sampled {len(pixels)} pixels from {image_path} {region}")
    return region_stats(pixels, region, label)


def print_stats(stats: RegionStats) -> None:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value", style="bold")

    rgb = stats.avg_rgb
    hsv = stats.avg_hsv
    table.add_row("Region", f"{stats.region} ({stats.pixel_count} pixels)")
    table.add_row("Avg RGB", f"R={rgb['r']} G={rgb['g']} B={rgb['b']}")
    table.add_row("Avg HSV", f"H={hsv['h']}° S={hsv['s']} V={hsv['v']}")
    table.add_row("Hue range", f"{stats.h_range.min}°-{stats.h_range.max}° (std={stats.h_range.std}°)")
    table.add_row("Sat range", f"{stats.s_range.min}-{stats.s_range.max}")
    table.add_row("Lum range", f"{stats.v_range.min}-{stats.v_range.max}")

    console.print(Panel(table, title=f"[bold]{stats.label.upper()}[/]", border_style="cyan"))


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Extract color statistics from a region of a frame.")
    parser.add_argument("image_path", help="Path to a still frame (PNG, JPEG, TIFF...)")
    parser.add_argument("region", help="Region as x1,y1,x2,y2")
    parser.add_argument("label", nargs="?", default="sample", help="Label for this sample")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    setup_rich_logging(args.verbose)

    try:
        stats = analyze_image(args.image_path, parse_region(args.region), args.label)
    except (OSError, ValueError) as e:
        print_error(str(e))
        return 1

    if args.json:
        console.print_json(stats.model_dump_json())
    else:
        print_stats(stats)
    return 0


if __name__ == "__main__":
    sys.exit(main())
