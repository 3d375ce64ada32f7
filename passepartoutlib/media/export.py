#!/usr/bin/env python3

import os
import time
from fractions import Fraction
import PIL.Image
from passepartoutlib.core import export_profiles
from passepartoutlib.core import rules
from passepartoutlib.core import utils
from passepartoutlib.core import white_canvas
from passepartoutlib.core.contracts import ExportOutput, ExportProfiles, ImageExportProfile
from passepartoutlib.core.contracts import Margins, MediaInspection, RecommendationOutput
from passepartoutlib.core.contracts import Surface, VideoExportProfile

#============================================

DEFAULT_FPS = 30
JPEG_EXTENSIONS = ('.jpg', '.jpeg')
WHITE = (255, 255, 255)

#============================================

def build_fit_filter(target_width: int, target_height: int,
	white_canvas_enabled: bool, margins: Margins = None) -> str:
	"""
	Describe the scale/pad (or scale/crop) fit as an ffmpeg filter chain.

	Args:
		target_width: Output width.
		target_height: Output height.
		white_canvas_enabled: Contain-fit on a white canvas when True.
		margins: White-canvas margins.

	Returns:
		str: Comma separated ffmpeg filter chain.
	"""
	if white_canvas_enabled and margins is not None:
		(inner_width, inner_height) = white_canvas.compute_fit_box(
			target_width, target_height, margins)
		return ",".join([
			f"scale={inner_width}:{inner_height}:force_original_aspect_ratio=decrease",
			f"pad={inner_width}:{inner_height}:(ow-iw)/2:(oh-ih)/2:white",
			f"pad={target_width}:{target_height}:{margins.left}:{margins.top}:white",
		])
	return ",".join([
		f"scale={target_width}:{target_height}:force_original_aspect_ratio=increase",
		f"crop={target_width}:{target_height}",
	])

#============================================

def contain_size(source_width: int, source_height: int, box_width: int,
	box_height: int) -> tuple:
	scale = min(Fraction(box_width, source_width), Fraction(box_height, source_height))
	width = utils.clamp(utils.round_half_up(source_width * scale), 1, box_width)
	height = utils.clamp(utils.round_half_up(source_height * scale), 1, box_height)
	return (width, height)

#============================================

def cover_size(source_width: int, source_height: int, box_width: int,
	box_height: int) -> tuple:
	scale = max(Fraction(box_width, source_width), Fraction(box_height, source_height))
	width = max(box_width, utils.round_half_up(source_width * scale))
	height = max(box_height, utils.round_half_up(source_height * scale))
	return (width, height)

#============================================

def render_still(image: PIL.Image.Image, target_width: int, target_height: int,
	white_canvas_enabled: bool, margins: Margins = None) -> PIL.Image.Image:
	"""
	Apply the fit described by build_fit_filter() with Pillow.
	"""
	source = image.convert('RGB')
	(source_width, source_height) = source.size
	if white_canvas_enabled and margins is not None:
		(inner_width, inner_height) = white_canvas.compute_fit_box(
			target_width, target_height, margins)
		(width, height) = contain_size(source_width, source_height,
			inner_width, inner_height)
		scaled = source.resize((width, height), resample=PIL.Image.BICUBIC)
		canvas = PIL.Image.new('RGB', (target_width, target_height), color=WHITE)
		left = margins.left + (inner_width - width) // 2
		top = margins.top + (inner_height - height) // 2
		canvas.paste(scaled, (left, top))
		return canvas
	(width, height) = cover_size(source_width, source_height, target_width, target_height)
	scaled = source.resize((width, height), resample=PIL.Image.BICUBIC)
	left = (width - target_width) // 2
	top = (height - target_height) // 2
	return scaled.crop((left, top, left + target_width, top + target_height))

#============================================

def export_image(input_file: str, output_file: str,
	recommendation: RecommendationOutput, profile: ImageExportProfile,
	quality: int = None) -> ExportOutput:
	"""
	Render a still with Pillow using the selected image export profile.

	Args:
		input_file: Source image.
		output_file: Destination; JPEG quality applies to .jpg/.jpeg only.
		recommendation: Target resolution and white-canvas layout.
		profile: Image export profile for the mode/surface/orientation.
		quality: Override for profile.quality_default.

	Returns:
		ExportOutput: Export details.
	"""
	if quality is None:
		quality = profile.quality_default
	quality = export_profiles.check_int_range(quality, *export_profiles.QUALITY_RANGE,
		"quality")
	(width, height) = rules.parse_resolution(recommendation.target_resolution)
	canvas = recommendation.white_canvas
	fit_filter = build_fit_filter(width, height, canvas.enabled, canvas.margins)
	os.makedirs(os.path.dirname(os.path.abspath(output_file)), exist_ok=True)
	with PIL.Image.open(input_file) as image:
		rendered = render_still(image, width, height, canvas.enabled, canvas.margins)
	save_options = {}
	quality_used = None
	if os.path.splitext(output_file)[1].lower() in JPEG_EXTENSIONS:
		save_options['quality'] = quality
		quality_used = quality
	rendered.save(output_file, **save_options)
	return ExportOutput(
		input_path=os.path.abspath(input_file),
		output_path=os.path.abspath(output_file),
		kind="image",
		selected_profile=recommendation.selected_profile,
		target_resolution=recommendation.target_resolution,
		white_canvas_enabled=canvas.enabled,
		fit_filter=fit_filter,
		export_profile_id=profile.profile_id,
		quality_used=quality_used,
	)

#============================================

def build_video_command(input_path: str, output_path: str, fit_filter: str,
	fps, profile: VideoExportProfile, crf: int) -> list:
	cmd = [
		"ffmpeg", "-y", "-hide_banner", "-loglevel", "error",
		"-i", input_path,
		"-vf", fit_filter,
		"-r", str(fps),
		"-c:v", profile.ffmpeg_video_codec, "-crf", str(crf),
		"-pix_fmt", profile.pix_fmt,
		"-movflags", profile.movflags,
	]
	if profile.strip_audio:
		cmd.append("-an")
	else:
		cmd.extend(["-c:a", "aac"])
	cmd.append(output_path)
	return cmd

#============================================

def export_video(input_file: str, output_file: str,
	recommendation: RecommendationOutput, media: MediaInspection,
	profile: VideoExportProfile, crf: int = None) -> ExportOutput:
	utils.check_dependency("ffmpeg")
	if crf is None:
		crf = profile.crf_default
	crf = export_profiles.check_int_range(crf, *export_profiles.CRF_RANGE, "crf")
	t0 = time.time()
	(width, height) = rules.parse_resolution(recommendation.target_resolution)
	canvas = recommendation.white_canvas
	fit_filter = build_fit_filter(width, height, canvas.enabled, canvas.margins)
	input_path = os.path.abspath(input_file)
	output_path = os.path.abspath(output_file)
	os.makedirs(os.path.dirname(output_path), exist_ok=True)
	fps = media.fps if media.fps > 0 else DEFAULT_FPS
	cmd = build_video_command(input_path, output_path, fit_filter, fps, profile, crf)
	proc = utils.run_process(cmd)
	if proc.returncode != 0 or not os.path.isfile(output_path):
		raise RuntimeError(f"ffmpeg video export failed: {proc.stderr.strip()}")
	utils.log(f"Complete in {int(time.time() - t0)} seconds")
	return ExportOutput(
		input_path=input_path,
		output_path=output_path,
		kind="video",
		selected_profile=recommendation.selected_profile,
		target_resolution=recommendation.target_resolution,
		white_canvas_enabled=canvas.enabled,
		fit_filter=fit_filter,
		export_profile_id=profile.profile_id,
		crf_used=crf,
		video_codec=profile.output_codec,
		fps=fps,
		audio_stripped=profile.strip_audio,
	)

#============================================

def export_media(input_file: str, output_file: str,
	recommendation: RecommendationOutput, media: MediaInspection, surface: Surface,
	profiles: ExportProfiles = None, quality: int = None, crf: int = None) -> ExportOutput:
	"""
	Pick the export profile for the recommendation and export a still or video.

	Args:
		input_file: Source file.
		output_file: Destination.
		recommendation: Recommendation for the source.
		media: Inspection of the source.
		surface: Requested surface.
		profiles: Export profile tables; the packaged file when None.
		quality: JPEG quality override for stills.
		crf: CRF override for video.

	Returns:
		ExportOutput: Export details.
	"""
	if profiles is None:
		profiles = export_profiles.load_export_profiles()
	mode = recommendation.selected_mode
	if media.is_still:
		profile = export_profiles.select_image_profile(profiles, mode, surface,
			media.orientation)
		return export_image(input_file, output_file, recommendation, profile,
			quality=quality)
	profile = export_profiles.select_video_profile(profiles, mode, surface,
		media.orientation)
	return export_video(input_file, output_file, recommendation, media, profile, crf=crf)
