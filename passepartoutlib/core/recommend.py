#!/usr/bin/env python3

from passepartoutlib.core import rules
from passepartoutlib.core import utils
from passepartoutlib.core import white_canvas
from passepartoutlib.core.contracts import Mode, Orientation, RecommendInput
from passepartoutlib.core.contracts import RecommendationOutput, RiskLevel
from passepartoutlib.core.contracts import Ruleset, Surface, WhiteCanvasOutput, Workflow

#============================================

ORIENTATION_SOURCE_RATIOS = {
	Orientation.PORTRAIT: 0.8,
	Orientation.SQUARE: 1.0,
	Orientation.LANDSCAPE: 1.5,
}

#============================================

def source_ratio_from_orientation(orientation: Orientation) -> float:
	return ORIENTATION_SOURCE_RATIOS[Orientation(orientation)]

#============================================

def disabled_white_canvas() -> WhiteCanvasOutput:
	return WhiteCanvasOutput(enabled=False)

#============================================

def escalate_risk(base: RiskLevel, mode: Mode, surface: Surface) -> RiskLevel:
	"""
	Raise risk for experimental white-canvas exports.

	Experimental feed exports are at least medium, experimental story/reel
	exports are high. Reliable exports keep the base rule risk.
	"""
	if Mode(mode) != Mode.EXPERIMENTAL:
		return base
	floor = RiskLevel.MEDIUM
	if Surface(surface) != Surface.FEED:
		floor = RiskLevel.HIGH
	if base.rank >= floor.rank:
		return base
	return floor

#============================================

def recommend(request: RecommendInput, ruleset: Ruleset) -> RecommendationOutput:
	"""
	Build the export recommendation for one request.

	Args:
		request: Mode, surface, orientation and white-canvas options.
		ruleset: Loaded ruleset.

	Returns:
		RecommendationOutput: Target profile, resolution, risk and canvas.
	"""
	mode = Mode(request.mode)
	surface = Surface(request.surface)
	orientation = Orientation(request.orientation)
	workflow = Workflow(request.workflow or Workflow.UNKNOWN)
	base = rules.select_profile_rule(ruleset, mode, surface, orientation)
	if not request.white_canvas:
		return RecommendationOutput(
			selected_mode=mode,
			selected_profile=base.profile_id,
			target_resolution=base.resolution,
			reason=base.reason,
			risk_level=base.risk_level,
			workflow_note=f"Workflow set to {workflow.value}.",
			white_canvas=disabled_white_canvas(),
		)
	choice = white_canvas.resolve_canvas_profile(ruleset, surface, workflow,
		requested_profile=request.canvas_profile, surface_resolution=base.resolution)
	style = white_canvas.resolve_style(ruleset, request.canvas_style)
	(width, height) = rules.parse_resolution(choice.resolution)
	source_ratio = request.source_ratio
	if source_ratio is None:
		source_ratio = source_ratio_from_orientation(orientation)
	margins = white_canvas.compute_margins(width, height, source_ratio,
		ruleset.styles[style])
	return RecommendationOutput(
		selected_mode=mode,
		selected_profile=f"{mode.value}_{surface.value}_white_canvas_{choice.profile}",
		target_resolution=choice.resolution,
		reason=(f"White-canvas contain profile {choice.profile} ({style}) selected "
			f"for {orientation.value} source."),
		risk_level=escalate_risk(base.risk_level, mode, surface),
		workflow_note=choice.workflow_note,
		white_canvas=WhiteCanvasOutput(
			enabled=True,
			profile=choice.profile,
			style=style,
			margins=margins,
			contain_only=True,
			no_crop=True,
		),
	)

#============================================

def to_stable_json(output: RecommendationOutput) -> str:
	return utils.stable_json(output.to_dict())
