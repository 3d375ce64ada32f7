#!/usr/bin/env python3

"""
White-canvas profile resolution and contain-fit margin computation.

The white canvas never crops: the source is scaled to fit inside the inner
box left by the margins and the rest of the canvas is padded white.
"""

# Standard Library
import dataclasses

# local repo modules
from passepartoutlib.core import utils
from passepartoutlib.core.contracts import FEED_APP_DIRECT, FEED_COMPAT
from passepartoutlib.core.contracts import Margins, Ruleset, Surface, Workflow

#============================================

PORTRAIT_MARGIN_RATIO = 0.05
LANDSCAPE_SIDE_RATIO = 0.04
LANDSCAPE_BAND_RATIO = 0.16

#============================================

@dataclasses.dataclass(frozen=True)
class CanvasProfileChoice():
	profile: str
	resolution: str
	workflow_note: str

#============================================

def resolve_canvas_profile(ruleset: Ruleset, surface: Surface, workflow: Workflow,
	requested_profile: str = None, surface_resolution: str = None) -> CanvasProfileChoice:
	"""
	Pick the effective canvas profile for a surface and workflow.

	Feed profiles listed in app_direct_only_profiles fall back to feed_compat
	for any other workflow. Story and reel use a fixed {surface}_default
	profile at the surface resolution and ignore feed profile requests.

	Args:
		ruleset: Loaded ruleset.
		surface: Target surface.
		workflow: Delivery workflow.
		requested_profile: Optional feed canvas profile name.
		surface_resolution: Base rule resolution, used for story/reel.

	Returns:
		CanvasProfileChoice: Profile name, canvas resolution and note.
	"""
	surface = Surface(surface)
	workflow = Workflow(workflow)
	if surface != Surface.FEED:
		profile = f"{surface.value}_default"
		if surface_resolution is None:
			raise RuntimeError(f"{profile} requires the {surface.value} base resolution")
		note = f"White-canvas uses {profile} profile for {surface.value}."
		if requested_profile is not None:
			note = (f"Canvas profile {requested_profile} is feed-only; "
				f"ignored for {surface.value}, using {profile}.")
		return CanvasProfileChoice(profile, surface_resolution, note)
	selected = requested_profile or FEED_COMPAT
	if selected not in ruleset.canvas_profiles:
		raise RuntimeError(f"unknown white-canvas profile: {selected}")
	if selected in ruleset.app_direct_only_profiles and workflow != Workflow.APP_DIRECT:
		note = (f"Requested {selected} is app_direct-only; fallback to {FEED_COMPAT} "
			"for deterministic compatibility.")
		if FEED_COMPAT not in ruleset.canvas_profiles:
			raise RuntimeError(f"fallback canvas profile {FEED_COMPAT} is not configured")
		return CanvasProfileChoice(FEED_COMPAT, ruleset.canvas_profiles[FEED_COMPAT], note)
	if selected == FEED_APP_DIRECT:
		note = f"Using {selected} white-canvas profile for app_direct workflow."
	else:
		note = f"Using {selected} white-canvas profile."
	return CanvasProfileChoice(selected, ruleset.canvas_profiles[selected], note)

#============================================

def resolve_style(ruleset: Ruleset, requested_style: str = None) -> str:
	style = requested_style or ruleset.default_style
	if style not in ruleset.styles:
		raise RuntimeError(f"unknown white-canvas style: {style}")
	return style

#============================================

def compute_base_margins(canvas_width: int, canvas_height: int,
	source_ratio: float) -> Margins:
	if source_ratio <= 1.0:
		base = utils.scaled_round(PORTRAIT_MARGIN_RATIO, min(canvas_width, canvas_height))
		return Margins(left=base, top=base, right=base, bottom=base)
	side = utils.scaled_round(LANDSCAPE_SIDE_RATIO, canvas_width)
	band = utils.scaled_round(LANDSCAPE_BAND_RATIO, canvas_height)
	return Margins(left=side, top=band, right=side, bottom=band)

#============================================

def compute_margins(canvas_width: int, canvas_height: int, source_ratio: float,
	extra_bottom_ratio: float = 0.0) -> Margins:
	"""
	Compute white-canvas margins for a canvas and source aspect ratio.

	Args:
		canvas_width: Canvas width in pixels.
		canvas_height: Canvas height in pixels.
		source_ratio: Source width / height.
		extra_bottom_ratio: Style ratio of canvas height added to the bottom.

	Returns:
		Margins: Pixel margins.
	"""
	base = compute_base_margins(canvas_width, canvas_height, source_ratio)
	extra = utils.scaled_round(extra_bottom_ratio, canvas_height)
	if extra == 0:
		return base
	return dataclasses.replace(base, bottom=base.bottom + extra)

#============================================

def compute_fit_box(canvas_width: int, canvas_height: int, margins: Margins) -> tuple:
	"""
	Inner box the source is contain-fitted into.

	Returns:
		tuple: (inner_width, inner_height).
	"""
	inner_width = canvas_width - (margins.left + margins.right)
	inner_height = canvas_height - (margins.top + margins.bottom)
	if inner_width <= 0 or inner_height <= 0:
		raise RuntimeError(
			f"invalid white-canvas margins: non-positive inner frame "
			f"{inner_width}x{inner_height} on {canvas_width}x{canvas_height} canvas"
		)
	return (inner_width, inner_height)
