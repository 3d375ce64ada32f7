#!/usr/bin/env python3

"""
Analyze, report and benchmark pipelines that tie inspection, recommendation,
export and scoring together for one input file.
"""

# Standard Library
import dataclasses

# local repo modules
from passepartoutlib.core import benchmark as scorer
from passepartoutlib.core.contracts import BenchmarkOutput, Comparison, ExportProfiles, Mode
from passepartoutlib.core.contracts import MediaInspection, ObjectiveMetrics
from passepartoutlib.core.contracts import RecommendInput, RecommendationOutput
from passepartoutlib.core.contracts import Record, Ruleset, Surface, TierName
from passepartoutlib.core.contracts import TierOutput, WhiteCanvasOutput, Workflow
from passepartoutlib.core.recommend import recommend
from passepartoutlib.core.tier import classify_tier
from passepartoutlib.media import export as media_export
from passepartoutlib.media import inspector
from passepartoutlib.media import metrics

#============================================

@dataclasses.dataclass(frozen=True)
class ExportRequest(Record):
	file: str
	mode: Mode
	surface: Surface
	workflow: Workflow = Workflow.UNKNOWN
	white_canvas: bool = False
	canvas_profile: str = None
	canvas_style: str = None
	quality: int = None
	crf: int = None

@dataclasses.dataclass(frozen=True)
class Selection(Record):
	mode: Mode
	surface: Surface
	workflow: Workflow
	profile: str
	target_resolution: str

@dataclasses.dataclass(frozen=True)
class AnalyzeOutput(Record):
	input: MediaInspection
	selection: Selection
	tier: TierOutput
	white_canvas: WhiteCanvasOutput

@dataclasses.dataclass(frozen=True)
class ReportCheck(Record):
	id: str
	label: str
	status: str
	message: str

@dataclasses.dataclass(frozen=True)
class ReportOutput(Record):
	analyze: AnalyzeOutput
	checks: tuple
	next_actions: tuple

#============================================

def recommend_for_media(request: ExportRequest, media: MediaInspection,
	ruleset: Ruleset) -> RecommendationOutput:
	return recommend(RecommendInput(
		mode=request.mode,
		surface=request.surface,
		orientation=media.orientation,
		workflow=request.workflow or Workflow.UNKNOWN,
		white_canvas=bool(request.white_canvas),
		canvas_profile=request.canvas_profile,
		canvas_style=request.canvas_style,
		source_ratio=media.width / media.height,
	), ruleset)

#============================================

def analyze(request: ExportRequest, ruleset: Ruleset,
	media: MediaInspection = None) -> AnalyzeOutput:
	"""
	Inspect a file and attach its recommendation and tier.

	Args:
		request: File and export options.
		ruleset: Loaded ruleset.
		media: Existing inspection of request.file, if already known.

	Returns:
		AnalyzeOutput: Inspection, selection, tier and white-canvas details.
	"""
	if media is None:
		media = inspector.inspect_media(request.file)
	recommendation = recommend_for_media(request, media, ruleset)
	tier = classify_tier(media.width, media.height, request.surface)
	return AnalyzeOutput(
		input=media,
		selection=Selection(
			mode=Mode(request.mode),
			surface=Surface(request.surface),
			workflow=Workflow(request.workflow or Workflow.UNKNOWN),
			profile=recommendation.selected_profile,
			target_resolution=recommendation.target_resolution,
		),
		tier=tier,
		white_canvas=recommendation.white_canvas,
	)

#============================================

def _check(check_id: str, label: str, passed: bool, pass_message: str,
	warn_message: str) -> ReportCheck:
	if passed:
		return ReportCheck(check_id, label, "pass", pass_message)
	return ReportCheck(check_id, label, "warn", warn_message)

#============================================

def build_report(request: ExportRequest, ruleset: Ruleset) -> ReportOutput:
	analyzed = analyze(request, ruleset)
	media = analyzed.input
	checks = [
		_check("input_width_min", "Input width baseline", media.width >= 320,
			f"Input width {media.width}px is within baseline threshold.",
			f"Input width {media.width}px is below baseline threshold (320px)."),
		_check("aspect_fit", "Aspect fit",
			analyzed.tier.name != TierName.ASPECT_CORRECTION,
			"Input aspect is within supported bounds for selected surface.",
			"Input aspect is outside supported bounds for selected surface."),
	]
	if media.is_still:
		checks.append(ReportCheck("audio_present", "Audio track", "pass",
			"Still image input: audio track is not applicable."))
		checks.append(ReportCheck("codec_preference", "Codec preference", "pass",
			"Still image input: codec preference is not applicable."))
	else:
		checks.append(_check("audio_present", "Audio track", media.has_audio,
			"Audio track detected in input video.",
			"No audio track detected in input video."))
		checks.append(_check("codec_preference", "Codec preference",
			media.codec == "h264",
			"Input codec is h264 and matches baseline preference.",
			f"Input codec {media.codec} differs from h264 baseline preference."))
	next_actions = []
	if media.is_still:
		next_actions.append("Use export for deterministic still export.")
	else:
		next_actions.append("Use export for deterministic video export.")
	if any(check.status == "warn" for check in checks):
		next_actions.append("Review warning checks before upload.")
	if analyzed.white_canvas.enabled:
		next_actions.append("Confirm white-canvas margins visually before posting.")
	return ReportOutput(analyze=analyzed, checks=tuple(checks),
		next_actions=tuple(next_actions))

#============================================

def build_comparison(input_media: MediaInspection, output_media: MediaInspection,
	target_resolution: str, objective: ObjectiveMetrics = None) -> Comparison:
	"""
	Compare the declared source and output inspections.

	Args:
		input_media: Inspection of the source.
		output_media: Inspection of the export.
		target_resolution: Resolution the export aimed for.
		objective: Optional PSNR/SSIM measurements.

	Returns:
		Comparison: Resolution, bitrate, colorspace and audio comparison.
	"""
	if objective is None:
		objective = ObjectiveMetrics()
	output_matches_target = output_media.resolution == target_resolution
	input_bitrate = input_media.bitrate_kbps
	output_bitrate = output_media.bitrate_kbps
	bitrate_delta = None
	if input_bitrate is not None and output_bitrate is not None:
		bitrate_delta = output_bitrate - input_bitrate
	notes = []
	if not output_matches_target:
		notes.append(f"Output resolution {output_media.resolution} differs from "
			f"target {target_resolution}.")
	if bitrate_delta is not None:
		notes.append(f"Bitrate delta is {bitrate_delta} kbps.")
	if objective.note is not None:
		notes.append(objective.note)
	return Comparison(
		input_resolution=input_media.resolution,
		output_resolution=output_media.resolution,
		target_resolution=target_resolution,
		output_matches_target=output_matches_target,
		input_bitrate_kbps=input_bitrate,
		output_bitrate_kbps=output_bitrate,
		bitrate_delta_kbps=bitrate_delta,
		input_colorspace=input_media.colorspace,
		output_colorspace=output_media.colorspace,
		input_has_audio=input_media.has_audio,
		output_has_audio=output_media.has_audio,
		output_codec=output_media.codec,
		psnr_db=objective.psnr_db,
		ssim=objective.ssim,
		notes=tuple(notes),
	)

#============================================

def run_benchmark(request: ExportRequest, output_file: str, ruleset: Ruleset,
	profiles: ExportProfiles = None) -> BenchmarkOutput:
	"""
	Export a file per its recommendation and score the result.
	"""
	input_media = inspector.inspect_media(request.file)
	recommendation = recommend_for_media(request, input_media, ruleset)
	exported = media_export.export_media(request.file, output_file,
		recommendation, input_media, request.surface, profiles,
		quality=request.quality, crf=request.crf)
	output_media = inspector.inspect_media(output_file)
	objective = metrics.compute_objective_metrics(request.file, output_file,
		input_media.is_still)
	comparison = build_comparison(input_media, output_media,
		recommendation.target_resolution, objective)
	return scorer.benchmark(comparison, export=exported)
