"""
Pytest coverage for source tier classification.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from passepartoutlib.core.contracts import RiskLevel, Surface, TierName
from passepartoutlib.core.tier import classify_tier

#============================================

@pytest.mark.parametrize(
	("width", "height", "surface", "tier", "risk"),
	[
		(319, 398, Surface.FEED, TierName.UPSCALE, RiskLevel.HIGH),
		(1080, 1350, Surface.FEED, TierName.PRESERVE, RiskLevel.LOW),
		(320, 400, Surface.FEED, TierName.PRESERVE, RiskLevel.LOW),
		(1440, 1800, Surface.FEED, TierName.DOWNSCALE, RiskLevel.MEDIUM),
		(1080, 1920, Surface.FEED, TierName.ASPECT_CORRECTION, RiskLevel.MEDIUM),
		(1080, 1920, Surface.STORY, TierName.PRESERVE, RiskLevel.LOW),
		(1080, 1920, Surface.REEL, TierName.PRESERVE, RiskLevel.LOW),
		(1000, 2000, Surface.REEL, TierName.ASPECT_CORRECTION, RiskLevel.MEDIUM),
		(0, 100, Surface.FEED, TierName.ASPECT_CORRECTION, RiskLevel.HIGH),
		(100, -5, Surface.STORY, TierName.ASPECT_CORRECTION, RiskLevel.HIGH),
	],
)
def test_classify_tier(width, height, surface, tier, risk) -> None:
	result = classify_tier(width, height, surface)
	assert result.name == tier
	assert result.risk_level == risk

#============================================

def test_aspect_checked_before_width() -> None:
	"""
	A narrow source outside aspect bounds reports aspect correction, not upscale.
	"""
	result = classify_tier(200, 400, Surface.FEED)
	assert result.name == TierName.ASPECT_CORRECTION

#============================================

def test_bounds_are_inclusive() -> None:
	assert classify_tier(800, 1000, Surface.FEED).name == TierName.PRESERVE
	assert classify_tier(1000, 1777, Surface.FEED).name == TierName.ASPECT_CORRECTION
	# 1.91 exactly
	assert classify_tier(955, 500, Surface.FEED).name == TierName.PRESERVE
