#!/usr/bin/env python3

import math
from fractions import Fraction
from passepartoutlib.core.contracts import RiskLevel, Surface, TierName, TierOutput

#============================================

FEED_BOUNDS = (Fraction(4, 5), Fraction("1.91"))
VERTICAL_BOUNDS = (Fraction(9, 16), Fraction("1.91"))
MIN_PRESERVE_WIDTH = 320
MAX_PRESERVE_WIDTH = 1080

#============================================

def ratio_bounds(surface: Surface) -> tuple:
	if Surface(surface) == Surface.FEED:
		return FEED_BOUNDS
	return VERTICAL_BOUNDS

#============================================

def classify_tier(width, height, surface: Surface) -> TierOutput:
	"""
	Classify how much the platform is expected to alter a source.

	Aspect support is checked before width so an unsupported aspect is
	always reported as aspect correction.

	Args:
		width: Source width in pixels.
		height: Source height in pixels.
		surface: Target surface.

	Returns:
		TierOutput: Tier, reason and risk.
	"""
	valid = True
	for value in (width, height):
		if isinstance(value, bool) or not isinstance(value, (int, float)):
			valid = False
		elif not math.isfinite(value) or value <= 0:
			valid = False
	if not valid:
		return TierOutput(
			name=TierName.ASPECT_CORRECTION,
			reason="Invalid dimensions: width and height must be positive.",
			risk_level=RiskLevel.HIGH,
		)
	surface = Surface(surface)
	ratio = Fraction(width) / Fraction(height)
	(low, high) = ratio_bounds(surface)
	if ratio < low or ratio > high:
		return TierOutput(
			name=TierName.ASPECT_CORRECTION,
			reason=(f"Aspect ratio {float(ratio):.4f} is outside supported "
				f"{surface.value} bounds."),
			risk_level=RiskLevel.MEDIUM,
		)
	if width < MIN_PRESERVE_WIDTH:
		return TierOutput(
			name=TierName.UPSCALE,
			reason=f"Input width is below {MIN_PRESERVE_WIDTH} and may be upscaled by the platform.",
			risk_level=RiskLevel.HIGH,
		)
	if width > MAX_PRESERVE_WIDTH:
		return TierOutput(
			name=TierName.DOWNSCALE,
			reason=f"Input width is above {MAX_PRESERVE_WIDTH} and likely to be downscaled.",
			risk_level=RiskLevel.MEDIUM,
		)
	return TierOutput(
		name=TierName.PRESERVE,
		reason=(f"Input width is within {MIN_PRESERVE_WIDTH}..{MAX_PRESERVE_WIDTH} "
			"and aspect is supported."),
		risk_level=RiskLevel.LOW,
	)
