#!/usr/bin/env python3

import json
import os
from fractions import Fraction
import PIL.Image
from passepartoutlib.core import utils
from passepartoutlib.core.contracts import MediaInspection, Orientation

#============================================

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.ppm', '.pgm', '.bmp', '.webp', '.tif', '.tiff')

IMAGE_MODE_COLORSPACES = {
	'1': "gray",
	'L': "gray",
	'LA': "gray",
	'I': "gray",
	'I;16': "gray",
	'CMYK': "cmyk",
	'YCbCr': "ycbcr",
}

#============================================

def is_still_image(path: str) -> bool:
	return os.path.splitext(path)[1].lower() in IMAGE_EXTENSIONS

#============================================

def detect_orientation(width: int, height: int) -> Orientation:
	if width == height:
		return Orientation.SQUARE
	if width > height:
		return Orientation.LANDSCAPE
	return Orientation.PORTRAIT

#============================================

def format_aspect(width: int, height: int) -> str:
	if height <= 0:
		raise RuntimeError("cannot compute aspect ratio with non-positive height")
	return f"{width / height:.4f}"

#============================================

def parse_frame_rate(raw) -> float:
	if raw is None:
		return 0.0
	text = str(raw)
	if '/' in text:
		(num, den) = text.split('/', 1)
		if int(den) == 0:
			return 0.0
		return round(float(Fraction(int(num), int(den))), 3)
	return round(float(text), 3)

#============================================

def _optional_float(raw):
	if raw in (None, "", "N/A"):
		return None
	return float(raw)

#============================================

def inspect_image(path: str) -> MediaInspection:
	with PIL.Image.open(path) as image:
		(width, height) = image.size
		mode = image.mode
	if width <= 0 or height <= 0:
		raise RuntimeError(f"invalid image dimensions in {path}")
	return MediaInspection(
		path=path,
		width=width,
		height=height,
		aspect_ratio=format_aspect(width, height),
		orientation=detect_orientation(width, height),
		colorspace=IMAGE_MODE_COLORSPACES.get(mode, "sRGB"),
		codec=None,
		fps=0,
	)

#============================================

def ffprobe_streams(path: str) -> dict:
	utils.check_dependency("ffprobe")
	cmd = [
		"ffprobe", "-v", "error",
		"-show_entries",
		"format=duration,bit_rate:stream=codec_type,codec_name,width,height,"
		"avg_frame_rate,r_frame_rate,bit_rate,color_space",
		"-of", "json", path,
	]
	proc = utils.run_process(cmd)
	if proc.returncode != 0:
		raise RuntimeError(f"ffprobe failed for {path}: {proc.stderr.strip()}")
	return json.loads(proc.stdout or "{}")

#============================================

def inspect_video(path: str) -> MediaInspection:
	data = ffprobe_streams(path)
	streams = data.get('streams', [])
	video = None
	audio = None
	for stream in streams:
		if stream.get('codec_type') == 'video' and video is None:
			video = stream
		elif stream.get('codec_type') == 'audio' and audio is None:
			audio = stream
	if video is None:
		raise RuntimeError(f"no video stream found in {path}")
	width = int(video.get('width') or 0)
	height = int(video.get('height') or 0)
	if width <= 0 or height <= 0:
		raise RuntimeError(f"invalid video dimensions in {path}")
	fps = parse_frame_rate(video.get('avg_frame_rate'))
	if fps <= 0:
		fps = parse_frame_rate(video.get('r_frame_rate'))
	container = data.get('format', {})
	bit_rate = _optional_float(video.get('bit_rate'))
	if bit_rate is None:
		bit_rate = _optional_float(container.get('bit_rate'))
	bitrate_kbps = None
	if bit_rate is not None:
		bitrate_kbps = utils.round_half_up(bit_rate / 1000)
	duration = _optional_float(container.get('duration'))
	return MediaInspection(
		path=path,
		width=width,
		height=height,
		aspect_ratio=format_aspect(width, height),
		orientation=detect_orientation(width, height),
		colorspace=video.get('color_space') or "unknown",
		codec=video.get('codec_name'),
		fps=fps,
		duration_seconds=duration,
		bitrate_kbps=bitrate_kbps,
		has_audio=audio is not None,
		audio_codec=audio.get('codec_name') if audio is not None else None,
	)

#============================================

def inspect_media(path: str) -> MediaInspection:
	"""
	Inspect a still image or video file.

	Args:
		path: Media file path.

	Returns:
		MediaInspection: Dimensions, codec and stream facts.
	"""
	utils.ensure_file_exists(path)
	if is_still_image(path):
		return inspect_image(path)
	return inspect_video(path)
