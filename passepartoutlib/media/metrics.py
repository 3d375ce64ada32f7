#!/usr/bin/env python3

"""
Objective quality metrics (PSNR, SSIM) between a source and its export.

Metrics are optional inputs to scoring: every failure path returns null
values with a note instead of raising.
"""

# Standard Library
import math
import os
import re
import shutil

# PIP3 modules
import numpy
import PIL.Image
from scipy.ndimage import gaussian_filter

# local repo modules
from passepartoutlib.core import utils
from passepartoutlib.core.contracts import ObjectiveMetrics

#============================================

PSNR_IDENTICAL_DB = 100.0
PEAK_VALUE = 255.0
SSIM_SIGMA = 1.5
SSIM_C1 = (0.01 * PEAK_VALUE) ** 2
SSIM_C2 = (0.03 * PEAK_VALUE) ** 2

PSNR_AVERAGE_PATTERN = re.compile(r"average:([0-9.]+|inf)")
SSIM_ALL_PATTERN = re.compile(r"All:([0-9.]+)")

#============================================

def _load_gray(path: str, size: tuple = None) -> numpy.ndarray:
	with PIL.Image.open(path) as image:
		gray = image.convert('L')
		if size is not None and gray.size != size:
			gray = gray.resize(size, resample=PIL.Image.BICUBIC)
		return numpy.asarray(gray, dtype=numpy.float64)

#============================================

def psnr(reference: numpy.ndarray, distorted: numpy.ndarray) -> float:
	mse = float(numpy.mean((reference - distorted) ** 2))
	if mse == 0:
		return PSNR_IDENTICAL_DB
	return round(10.0 * math.log10((PEAK_VALUE ** 2) / mse), 4)

#============================================

def ssim(reference: numpy.ndarray, distorted: numpy.ndarray) -> float:
	"""
	Mean structural similarity with a Gaussian window.

	Args:
		reference: Grayscale reference array.
		distorted: Grayscale distorted array of the same shape.

	Returns:
		float: SSIM in [0, 1], rounded to 4 decimals.
	"""
	mu_ref = gaussian_filter(reference, SSIM_SIGMA)
	mu_dist = gaussian_filter(distorted, SSIM_SIGMA)
	var_ref = gaussian_filter(reference * reference, SSIM_SIGMA) - mu_ref ** 2
	var_dist = gaussian_filter(distorted * distorted, SSIM_SIGMA) - mu_dist ** 2
	covariance = gaussian_filter(reference * distorted, SSIM_SIGMA) - mu_ref * mu_dist
	numerator = (2 * mu_ref * mu_dist + SSIM_C1) * (2 * covariance + SSIM_C2)
	denominator = (mu_ref ** 2 + mu_dist ** 2 + SSIM_C1) * (var_ref + var_dist + SSIM_C2)
	value = float(numpy.mean(numerator / denominator))
	return round(utils.clamp(value, 0.0, 1.0), 4)

#============================================

def still_metrics(input_path: str, output_path: str) -> ObjectiveMetrics:
	with PIL.Image.open(output_path) as image:
		size = image.size
	distorted = _load_gray(output_path)
	# reference is scaled to the output, as ffmpeg scale2ref does
	reference = _load_gray(input_path, size)
	return ObjectiveMetrics(psnr_db=psnr(reference, distorted),
		ssim=ssim(reference, distorted))

#============================================

def parse_psnr_average(stderr: str):
	matches = PSNR_AVERAGE_PATTERN.findall(stderr)
	if len(matches) == 0:
		return None
	token = matches[-1]
	if token == "inf":
		return PSNR_IDENTICAL_DB
	return round(float(token), 4)

#============================================

def parse_ssim_all(stderr: str):
	matches = SSIM_ALL_PATTERN.findall(stderr)
	if len(matches) == 0:
		return None
	return round(utils.clamp(float(matches[-1]), 0.0, 1.0), 4)

#============================================

def video_metrics(input_path: str, output_path: str) -> ObjectiveMetrics:
	if shutil.which("ffmpeg") is None:
		return ObjectiveMetrics(note="objective metrics unavailable: ffmpeg not found")
	filter_graph = (
		"[0:v][1:v]scale2ref=flags=bicubic[dist][ref];"
		"[dist]split[dist_psnr][dist_ssim];[ref]split[ref_psnr][ref_ssim];"
		"[dist_psnr][ref_psnr]psnr;[dist_ssim][ref_ssim]ssim"
	)
	cmd = [
		"ffmpeg", "-hide_banner", "-loglevel", "info",
		"-i", os.path.abspath(input_path),
		"-i", os.path.abspath(output_path),
		"-filter_complex", filter_graph,
		"-an", "-f", "null", "-",
	]
	proc = utils.run_process(cmd)
	if proc.returncode != 0:
		return ObjectiveMetrics(
			note=f"objective metrics unavailable: {proc.stderr.strip()}")
	psnr_db = parse_psnr_average(proc.stderr)
	ssim_value = parse_ssim_all(proc.stderr)
	if psnr_db is None or ssim_value is None:
		return ObjectiveMetrics(psnr_db=psnr_db, ssim=ssim_value,
			note="objective metrics parse incomplete from ffmpeg output")
	return ObjectiveMetrics(psnr_db=psnr_db, ssim=ssim_value)

#============================================

def compute_objective_metrics(input_path: str, output_path: str,
	still: bool) -> ObjectiveMetrics:
	if not still:
		return video_metrics(input_path, output_path)
	try:
		return still_metrics(input_path, output_path)
	except (OSError, ValueError) as error:
		return ObjectiveMetrics(note=f"objective metrics unavailable: {error}")
