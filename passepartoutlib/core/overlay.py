#!/usr/bin/env python3

"""
Framing guides for portrait posts: a safe-zone and rule-of-thirds overlay,
and a preview of the centered square the profile grid shows.
"""

# Standard Library
import dataclasses
from fractions import Fraction
from types import MappingProxyType

# local repo modules
from passepartoutlib.core import utils
from passepartoutlib.core.contracts import Choice, Record

#============================================

class OverlayRatio(Choice):
	PORTRAIT_4_5 = "4:5"
	PORTRAIT_3_4 = "3:4"
	STORY_9_16 = "9:16"

CANVAS_SIZES = MappingProxyType({
	OverlayRatio.PORTRAIT_4_5: (1080, 1350),
	OverlayRatio.PORTRAIT_3_4: (1080, 1440),
	OverlayRatio.STORY_9_16: (1080, 1920),
})

SAFE_ZONE_INSET = Fraction(5, 100)

#============================================

@dataclasses.dataclass(frozen=True)
class Canvas(Record):
	width: int
	height: int

@dataclasses.dataclass(frozen=True)
class SafeZone(Record):
	left: int
	top: int
	right: int
	bottom: int
	width: int
	height: int

@dataclasses.dataclass(frozen=True)
class CropSquare(Record):
	left: int
	top: int
	right: int
	bottom: int
	size: int

@dataclasses.dataclass(frozen=True)
class Thirds(Record):
	vertical: tuple
	horizontal: tuple

@dataclasses.dataclass(frozen=True)
class OverlayOutput(Record):
	ratio: OverlayRatio
	canvas_resolution: str
	canvas: Canvas
	safe_zone: SafeZone
	thirds: Thirds
	output_svg_path: str = None

@dataclasses.dataclass(frozen=True)
class GridPreviewOutput(Record):
	ratio: OverlayRatio
	canvas_resolution: str
	canvas: Canvas
	grid_crop_square: CropSquare
	visible_fraction_percent: float
	output_svg_path: str = None

	@property
	def midline_y(self) -> int:
		return self.grid_crop_square.top + self.grid_crop_square.size // 2

#============================================

def canvas_for_ratio(ratio) -> Canvas:
	ratio = OverlayRatio.parse(ratio, "ratio")
	(width, height) = CANVAS_SIZES[ratio]
	return Canvas(width=width, height=height)

#============================================

def create_overlay(ratio, output_svg_path: str = None) -> OverlayOutput:
	"""
	Compute the safe zone and thirds guides for a post ratio.

	Args:
		ratio: One of 4:5, 3:4 or 9:16.
		output_svg_path: Recorded on the result when an SVG is written.

	Returns:
		OverlayOutput: Canvas, 5% inset safe zone and thirds lines.
	"""
	ratio = OverlayRatio.parse(ratio, "ratio")
	canvas = canvas_for_ratio(ratio)
	inset_x = utils.round_half_up(canvas.width * SAFE_ZONE_INSET)
	inset_y = utils.round_half_up(canvas.height * SAFE_ZONE_INSET)
	safe_zone = SafeZone(left=inset_x, top=inset_y, right=canvas.width - inset_x,
		bottom=canvas.height - inset_y, width=canvas.width - 2 * inset_x,
		height=canvas.height - 2 * inset_y)
	thirds = Thirds(
		vertical=(utils.round_half_up(Fraction(canvas.width, 3)),
			utils.round_half_up(Fraction(2 * canvas.width, 3))),
		horizontal=(utils.round_half_up(Fraction(canvas.height, 3)),
			utils.round_half_up(Fraction(2 * canvas.height, 3))),
	)
	return OverlayOutput(
		ratio=ratio,
		canvas_resolution=f"{canvas.width}x{canvas.height}",
		canvas=canvas,
		safe_zone=safe_zone,
		thirds=thirds,
		output_svg_path=output_svg_path,
	)

#============================================

def create_grid_preview(ratio, output_svg_path: str = None) -> GridPreviewOutput:
	"""
	Locate the centered square a profile grid crops from a tall post.
	"""
	ratio = OverlayRatio.parse(ratio, "ratio")
	canvas = canvas_for_ratio(ratio)
	size = canvas.width
	top = (canvas.height - size) // 2
	square = CropSquare(left=0, top=top, right=size, bottom=top + size, size=size)
	visible = Fraction(size * 100, canvas.height)
	# three decimals, half up
	visible_percent = float(Fraction(utils.round_half_up(visible * 1000), 1000))
	return GridPreviewOutput(
		ratio=ratio,
		canvas_resolution=f"{canvas.width}x{canvas.height}",
		canvas=canvas,
		grid_crop_square=square,
		visible_fraction_percent=visible_percent,
		output_svg_path=output_svg_path,
	)
