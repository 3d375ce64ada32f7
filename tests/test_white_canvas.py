"""
Pytest coverage for white-canvas profile, style and margin math.
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
from passepartoutlib.core import rules
from passepartoutlib.core import white_canvas
from passepartoutlib.core.contracts import Margins, Surface, Workflow

#============================================

RULESET = rules.RulesetLoader().load()

#============================================

def test_landscape_margins_default_style() -> None:
	"""
	Landscape sources get side margins and top/bottom bands.
	"""
	margins = white_canvas.compute_margins(1080, 1350, 1.2)
	assert margins == Margins(left=43, top=216, right=43, bottom=216)

#============================================

def test_portrait_margins_uniform() -> None:
	margins = white_canvas.compute_margins(1080, 1350, 0.8)
	assert margins == Margins(left=54, top=54, right=54, bottom=54)
	square = white_canvas.compute_margins(1080, 1440, 1.0)
	assert square == Margins(left=54, top=54, right=54, bottom=54)

#============================================

def test_style_adds_bottom_only() -> None:
	base = white_canvas.compute_margins(1080, 1350, 0.8)
	styled = white_canvas.compute_margins(1080, 1350, 0.8, 0.08)
	assert styled.left == base.left
	assert styled.top == base.top
	assert styled.right == base.right
	# 0.08 * 1350 = 108
	assert styled.bottom == base.bottom + 108

#============================================

def test_app_direct_profile_kept_for_app_direct() -> None:
	choice = white_canvas.resolve_canvas_profile(RULESET, Surface.FEED,
		Workflow.APP_DIRECT, requested_profile="feed_app_direct")
	assert choice.profile == "feed_app_direct"
	assert choice.resolution == "1080x1440"

#============================================

@pytest.mark.parametrize("workflow", [Workflow.API_SCHEDULER, Workflow.UNKNOWN])
def test_app_direct_profile_falls_back(workflow) -> None:
	choice = white_canvas.resolve_canvas_profile(RULESET, Surface.FEED,
		workflow, requested_profile="feed_app_direct")
	assert choice.profile == "feed_compat"
	assert choice.resolution == "1080x1350"
	assert "fallback" in choice.workflow_note

#============================================

def test_feed_default_profile() -> None:
	choice = white_canvas.resolve_canvas_profile(RULESET, Surface.FEED, Workflow.UNKNOWN)
	assert choice.profile == "feed_compat"

#============================================

def test_story_uses_surface_default() -> None:
	choice = white_canvas.resolve_canvas_profile(RULESET, Surface.STORY,
		Workflow.APP_DIRECT, requested_profile="feed_app_direct",
		surface_resolution="1080x1920")
	assert choice.profile == "story_default"
	assert choice.resolution == "1080x1920"
	assert "feed-only" in choice.workflow_note

#============================================

def test_unknown_profile_and_style() -> None:
	with pytest.raises(RuntimeError):
		white_canvas.resolve_canvas_profile(RULESET, Surface.FEED, Workflow.UNKNOWN,
			requested_profile="feed_poster")
	with pytest.raises(RuntimeError):
		white_canvas.resolve_style(RULESET, "sepia")
	assert white_canvas.resolve_style(RULESET) == "gallery_clean"

#============================================

def test_fit_box_must_be_positive() -> None:
	assert white_canvas.compute_fit_box(1080, 1350, Margins(43, 216, 43, 216)) == (994, 918)
	with pytest.raises(RuntimeError):
		white_canvas.compute_fit_box(100, 100, Margins(50, 0, 50, 0))
