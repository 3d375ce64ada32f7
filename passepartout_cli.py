#!/usr/bin/env python3

"""
Command line entry point for export planning and validation.
"""

# Standard Library
import argparse
import dataclasses
import os
import sys

REPO_ROOT = os.path.dirname(os.path.abspath(__file__))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# PIP3 modules
from rich.console import Console
from rich.text import Text

# local repo modules
from passepartoutlib.core import export_profiles
from passepartoutlib.core import matrix
from passepartoutlib.core import overlay
from passepartoutlib.core import pipeline
from passepartoutlib.core import rules
from passepartoutlib.core import utils
from passepartoutlib.core.contracts import Mode, Orientation, RecommendInput
from passepartoutlib.core.contracts import Surface, Workflow
from passepartoutlib.core.recommend import recommend
from passepartoutlib.core.tier import classify_tier
from passepartoutlib.core.utils import ConfigError
from passepartoutlib.exporters import matrix_report
from passepartoutlib.exporters import svg_overlay
from passepartoutlib.media import export as media_export
from passepartoutlib.media import inspector

#============================================

NORD_COLORS = {
	'header': "#88C0D0",
	'ok': "#A3BE8C",
	'warn': "#EBCB8B",
	'error': "#BF616A",
	'dim': "#4C566A",
}

#============================================

def _add_common_args(parser: argparse.ArgumentParser) -> None:
	parser.add_argument('-r', '--ruleset', dest='ruleset_file', default=None,
		help='ruleset yaml/json file (default: packaged ruleset.v1.yaml)')
	parser.add_argument('-j', '--json', dest='json', action='store_true',
		help='print stable machine-readable json')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='suppress progress messages')

#============================================

def _add_export_args(parser: argparse.ArgumentParser) -> None:
	parser.add_argument('-m', '--mode', dest='mode', required=True,
		choices=Mode.values(), help='export mode')
	parser.add_argument('-s', '--surface', dest='surface', required=True,
		choices=Surface.values(), help='platform surface')
	parser.add_argument('-w', '--workflow', dest='workflow', default='unknown',
		choices=Workflow.values(), help='delivery workflow')
	parser.add_argument('--white-canvas', dest='white_canvas', action='store_true',
		help='contain-fit on a white canvas instead of cropping')
	parser.add_argument('--canvas-profile', dest='canvas_profile', default=None,
		help='white-canvas profile (feed only)')
	parser.add_argument('--canvas-style', dest='canvas_style', default=None,
		help='white-canvas style')

#============================================

def _add_profiles_arg(parser: argparse.ArgumentParser) -> None:
	parser.add_argument('-e', '--export-profiles', dest='export_profiles_file', default=None,
		help='export profiles yaml/json file (default: packaged export_profiles.v1.yaml)')

#============================================

def _add_encode_args(parser: argparse.ArgumentParser) -> None:
	_add_profiles_arg(parser)
	parser.add_argument('--quality', dest='quality', type=int, default=None,
		help='jpeg quality 1-95 for still output (default: profile quality_default)')
	parser.add_argument('--crf', dest='crf', type=int, default=None,
		help='video crf 0-51 (default: profile crf_default)')

#============================================

def parse_args(argv: list = None) -> argparse.Namespace:
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Export planning and validation")
	subparsers = parser.add_subparsers(dest='command', required=True)

	recommend_parser = subparsers.add_parser('recommend',
		help='recommend a target profile and resolution')
	_add_common_args(recommend_parser)
	_add_export_args(recommend_parser)
	recommend_parser.add_argument('-o', '--orientation', dest='orientation',
		required=True, choices=Orientation.values(), help='source orientation')
	recommend_parser.add_argument('--source-ratio', dest='source_ratio', type=float,
		default=None, help='source width/height override for margin math')

	tier_parser = subparsers.add_parser('tier', help='classify a source size')
	_add_common_args(tier_parser)
	tier_parser.add_argument('--width', dest='width', type=int, required=True)
	tier_parser.add_argument('--height', dest='height', type=int, required=True)
	tier_parser.add_argument('-s', '--surface', dest='surface', required=True,
		choices=Surface.values())

	for name, help_text in (
		('analyze', 'inspect a file and recommend an export'),
		('report', 'pre-upload checks for a file'),
	):
		sub = subparsers.add_parser(name, help=help_text)
		_add_common_args(sub)
		_add_export_args(sub)
		sub.add_argument('file', help='input media file')

	for name, help_text in (
		('export', 'export a file per its recommendation'),
		('benchmark', 'export a file and score the result'),
	):
		sub = subparsers.add_parser(name, help=help_text)
		_add_common_args(sub)
		_add_export_args(sub)
		sub.add_argument('file', help='input media file')
		sub.add_argument('--out', dest='out', required=True, help='output media file')
		_add_encode_args(sub)

	matrix_parser = subparsers.add_parser('validate-matrix',
		help='run a batch of benchmark cases')
	_add_common_args(matrix_parser)
	matrix_parser.add_argument('-c', '--cases', dest='cases_file', required=True,
		help='json/yaml list of cases')
	matrix_parser.add_argument('--only', dest='only_ids', default=None,
		help='comma separated case ids to run')
	matrix_parser.add_argument('--only-file', dest='only_file', default=None,
		help='file of case ids, one per line, # comments allowed')
	matrix_parser.add_argument('-n', '--max-cases', dest='max_cases', type=int,
		default=None, help='run at most this many selected cases')
	matrix_parser.add_argument('--jobs', dest='jobs', type=int, default=1,
		help='worker threads')
	matrix_parser.add_argument('-d', '--report-dir', dest='report_dir', default=None,
		help='write json, markdown and csv capture template here')
	matrix_parser.add_argument('--strict', dest='strict', action='store_true',
		help='exit 1 when any case fails')
	_add_profiles_arg(matrix_parser)

	for name, help_text in (
		('overlay', 'safe-zone and thirds guide for a post ratio'),
		('grid-preview', 'square the profile grid shows from a post ratio'),
	):
		sub = subparsers.add_parser(name, help=help_text)
		sub.add_argument('--ratio', dest='ratio', required=True,
			choices=overlay.OverlayRatio.values(), help='post aspect ratio')
		sub.add_argument('--out', dest='out', default=None, help='write an svg guide here')
		sub.add_argument('-j', '--json', dest='json', action='store_true',
			help='print stable machine-readable json')
		sub.add_argument('-q', '--quiet', dest='quiet', action='store_true',
			help='suppress progress messages')
	return parser.parse_args(argv)

#============================================

def _export_request(args: argparse.Namespace) -> pipeline.ExportRequest:
	return pipeline.ExportRequest(
		file=args.file,
		mode=Mode(args.mode),
		surface=Surface(args.surface),
		workflow=Workflow(args.workflow),
		white_canvas=args.white_canvas,
		canvas_profile=args.canvas_profile,
		canvas_style=args.canvas_style,
		quality=getattr(args, 'quality', None),
		crf=getattr(args, 'crf', None),
	)

#============================================

def _emit(console: Console, args: argparse.Namespace, payload: dict, lines: list) -> None:
	if args.json:
		print(utils.stable_json(payload))
		return
	for line in lines:
		console.print(line)

#============================================

def _warn_text(risk_level: str) -> Text:
	if risk_level == "low":
		return Text("Warnings: none", style=NORD_COLORS['ok'])
	return Text(f"Warnings: risk_level={risk_level}", style=f"bold {NORD_COLORS['warn']}")

#============================================

def run_recommend(args: argparse.Namespace, ruleset, console: Console) -> int:
	result = recommend(RecommendInput(
		mode=Mode(args.mode),
		surface=Surface(args.surface),
		orientation=Orientation(args.orientation),
		workflow=Workflow(args.workflow),
		white_canvas=args.white_canvas,
		canvas_profile=args.canvas_profile,
		canvas_style=args.canvas_style,
		source_ratio=args.source_ratio,
	), ruleset)
	lines = [
		Text(f"Summary: {result.selected_mode} {args.surface} {args.orientation} "
			f"-> {result.target_resolution}", style=f"bold {NORD_COLORS['header']}"),
		f"Profile: {result.selected_profile}",
		f"Reason: {result.reason}",
		_warn_text(result.risk_level.value),
		f"Workflow note: {result.workflow_note}",
	]
	if result.white_canvas.enabled:
		margins = result.white_canvas.margins
		lines.append(f"White canvas: profile={result.white_canvas.profile} "
			f"style={result.white_canvas.style} margins=left:{margins.left} "
			f"top:{margins.top} right:{margins.right} bottom:{margins.bottom} "
			"contain_only=true no_crop=true")
	_emit(console, args, result.to_dict(), lines)
	return 0

#============================================

def run_tier(args: argparse.Namespace, ruleset, console: Console) -> int:
	result = classify_tier(args.width, args.height, Surface(args.surface))
	lines = [
		Text(f"Tier: {result.name}", style=f"bold {NORD_COLORS['header']}"),
		f"Reason: {result.reason}",
		_warn_text(result.risk_level.value),
	]
	_emit(console, args, result.to_dict(), lines)
	return 0

#============================================

def run_analyze(args: argparse.Namespace, ruleset, console: Console) -> int:
	result = pipeline.analyze(_export_request(args), ruleset)
	lines = [
		Text(f"Input: {result.input.path} {result.input.resolution} "
			f"({result.input.orientation})", style=f"bold {NORD_COLORS['header']}"),
		f"Profile: {result.selection.profile} -> {result.selection.target_resolution}",
		f"Tier: {result.tier.name} ({result.tier.reason})",
		_warn_text(result.tier.risk_level.value),
	]
	_emit(console, args, result.to_dict(), lines)
	return 0

#============================================

def run_report(args: argparse.Namespace, ruleset, console: Console) -> int:
	result = pipeline.build_report(_export_request(args), ruleset)
	lines = [Text(f"Report: {result.analyze.input.path}",
		style=f"bold {NORD_COLORS['header']}")]
	for check in result.checks:
		color = NORD_COLORS['ok'] if check.status == "pass" else NORD_COLORS['warn']
		lines.append(Text(f"[{check.status}] {check.label}: {check.message}", style=color))
	for action in result.next_actions:
		lines.append(f"Next action: {action}")
	_emit(console, args, result.to_dict(), lines)
	return 0

#============================================

def run_export(args: argparse.Namespace, ruleset, console: Console) -> int:
	request = _export_request(args)
	media = inspector.inspect_media(request.file)
	recommendation = pipeline.recommend_for_media(request, media, ruleset)
	profiles = export_profiles.load_export_profiles(args.export_profiles_file)
	result = media_export.export_media(request.file, args.out, recommendation, media,
		request.surface, profiles, quality=request.quality, crf=request.crf)
	encoder = f"Export profile: {result.export_profile_id}"
	if result.quality_used is not None:
		encoder += f" quality={result.quality_used}"
	if result.crf_used is not None:
		encoder += f" crf={result.crf_used} codec={result.video_codec}"
	lines = [
		Text(f"Exported: {result.output_path}", style=f"bold {NORD_COLORS['header']}"),
		f"Profile: {result.selected_profile} -> {result.target_resolution}",
		encoder,
		f"Filter: {result.fit_filter}",
	]
	_emit(console, args, result.to_dict(), lines)
	return 0

#============================================

def run_benchmark(args: argparse.Namespace, ruleset, console: Console) -> int:
	profiles = export_profiles.load_export_profiles(args.export_profiles_file)
	result = pipeline.run_benchmark(_export_request(args), args.out, ruleset, profiles)
	score = result.score
	lines = [
		Text(f"Summary: {result.comparison.input_resolution} -> "
			f"{result.comparison.output_resolution}", style=f"bold {NORD_COLORS['header']}"),
		f"Score: {score.total}/100 ({score.grade})",
		f"Breakdown: resolution={score.resolution_score} bitrate={score.bitrate_score} "
		f"codec={score.codec_score}",
		f"Confidence: {result.confidence.value} ({result.confidence.label})",
	]
	_emit(console, args, result.to_dict(), lines)
	return 0

#============================================

def run_validate_matrix(args: argparse.Namespace, ruleset, console: Console) -> int:
	only_ids = None
	if args.only_ids is not None:
		only_ids = [value.strip() for value in args.only_ids.split(",") if value.strip()]
	all_cases = matrix.load_cases(args.cases_file, ruleset)
	profiles = export_profiles.load_export_profiles(args.export_profiles_file)
	result = matrix.run_matrix(all_cases, ruleset, only_ids=only_ids,
		only_file=args.only_file, max_cases=args.max_cases, jobs=args.jobs,
		profiles=profiles)
	if args.report_dir is not None:
		matrix_report.write_matrix_reports(result, args.report_dir, all_cases)
	lines = [Text(f"Summary: total={result.cases_total} succeeded={result.cases_succeeded} "
		f"failed={result.cases_failed} skipped={result.cases_skipped}",
		style=f"bold {NORD_COLORS['header']}")]
	for row in result.results:
		if row.ok:
			lines.append(Text(f"- {row.id}: ok score={row.benchmark.score.total} "
				f"grade={row.benchmark.score.grade}", style=NORD_COLORS['ok']))
		else:
			lines.append(Text(f"- {row.id}: error {row.error}", style=NORD_COLORS['error']))
	_emit(console, args, result.to_dict(), lines)
	if args.strict and result.cases_failed > 0:
		return 1
	return 0

#============================================

def run_overlay(args: argparse.Namespace, ruleset, console: Console) -> int:
	result = overlay.create_overlay(args.ratio)
	if args.out is not None:
		path = svg_overlay.write_svg(svg_overlay.build_overlay_svg(result), args.out)
		result = dataclasses.replace(result, output_svg_path=path)
	zone = result.safe_zone
	(v1, v2) = result.thirds.vertical
	(h1, h2) = result.thirds.horizontal
	lines = [
		Text(f"Summary: overlay ratio={result.ratio} canvas={result.canvas_resolution}",
			style=f"bold {NORD_COLORS['header']}"),
		f"Safe zone: left={zone.left} top={zone.top} right={zone.right} bottom={zone.bottom}",
		f"Thirds: vertical={v1},{v2} horizontal={h1},{h2}",
	]
	if result.output_svg_path is not None:
		lines.append(f"SVG: {result.output_svg_path}")
	lines.append("Next action: rerun with --json for machine-readable output.")
	_emit(console, args, result.to_dict(), lines)
	return 0

#============================================

def run_grid_preview(args: argparse.Namespace, ruleset, console: Console) -> int:
	result = overlay.create_grid_preview(args.ratio)
	if args.out is not None:
		path = svg_overlay.write_svg(svg_overlay.build_grid_preview_svg(result), args.out)
		result = dataclasses.replace(result, output_svg_path=path)
	crop = result.grid_crop_square
	lines = [
		Text(f"Summary: grid-preview ratio={result.ratio} canvas={result.canvas_resolution}",
			style=f"bold {NORD_COLORS['header']}"),
		f"Grid crop square: left={crop.left} top={crop.top} right={crop.right} "
		f"bottom={crop.bottom}",
		f"Visible in grid: {result.visible_fraction_percent:g}%",
	]
	if result.output_svg_path is not None:
		lines.append(f"SVG: {result.output_svg_path}")
	lines.append("Next action: rerun with --json for machine-readable output.")
	_emit(console, args, result.to_dict(), lines)
	return 0

#============================================

def check_canvas_args(args: argparse.Namespace, ruleset) -> None:
	"""
	Reject canvas profile and style names the ruleset does not define.
	"""
	profile = getattr(args, 'canvas_profile', None)
	if profile is not None and profile not in ruleset.canvas_profiles:
		allowed = "|".join(sorted(ruleset.canvas_profiles))
		raise ConfigError(f"--canvas-profile must be {allowed}, got {profile!r}",
			key_path="canvas_profile")
	style = getattr(args, 'canvas_style', None)
	if style is not None and style not in ruleset.styles:
		allowed = "|".join(sorted(ruleset.styles))
		raise ConfigError(f"--canvas-style must be {allowed}, got {style!r}",
			key_path="canvas_style")

#============================================

COMMANDS = {
	'recommend': run_recommend,
	'tier': run_tier,
	'analyze': run_analyze,
	'report': run_report,
	'export': run_export,
	'benchmark': run_benchmark,
	'validate-matrix': run_validate_matrix,
	'overlay': run_overlay,
	'grid-preview': run_grid_preview,
}

# commands that never read the ruleset
RULESET_FREE_COMMANDS = ('overlay', 'grid-preview')

#============================================

def main(argv: list = None) -> int:
	args = parse_args(argv)
	utils.set_quiet_mode(args.quiet or args.json)
	console = Console(highlight=False, markup=False, soft_wrap=True)
	try:
		ruleset = None
		if args.command not in RULESET_FREE_COMMANDS:
			ruleset = rules.load_ruleset(args.ruleset_file)
			check_canvas_args(args, ruleset)
		return COMMANDS[args.command](args, ruleset, console)
	except ConfigError as error:
		print(f"error: {error}", file=sys.stderr)
		return 2
	except RuntimeError as error:
		print(f"error: {error}", file=sys.stderr)
		return 1

#============================================

if __name__ == '__main__':
	sys.exit(main())
