"""
Pytest coverage for benchmark scoring and confidence.
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
from passepartoutlib.core import benchmark
from passepartoutlib.core.contracts import Comparison, ConfidenceLabel, Grade

#============================================

def _comparison(**overrides) -> Comparison:
	values = {
		'input_resolution': "1080x1350",
		'output_resolution': "1080x1350",
		'target_resolution': "1080x1350",
		'output_matches_target': True,
	}
	values.update(overrides)
	return Comparison(**values)

#============================================

def test_no_bitrate_unknown_codec() -> None:
	score = benchmark.score_comparison(_comparison())
	assert score.resolution_score == 50
	assert score.bitrate_score == 20
	assert score.codec_score == 10
	assert score.total == 80
	assert score.grade == Grade.B

#============================================

@pytest.mark.parametrize(
	("total", "grade"),
	[(100, Grade.A), (85, Grade.A), (84, Grade.B), (70, Grade.B),
		(69, Grade.C), (50, Grade.C), (49, Grade.D), (0, Grade.D)],
)
def test_grade_boundaries(total, grade) -> None:
	assert benchmark.grade_from_score(total) == grade

#============================================

def test_bitrate_penalty() -> None:
	# 25% drift: 40 - round(10) = 30
	comparison = _comparison(input_bitrate_kbps=4000, output_bitrate_kbps=3000,
		bitrate_delta_kbps=-1000, output_codec="h264")
	score = benchmark.score_comparison(comparison)
	assert score.bitrate_score == 30
	assert score.total == 90
	assert score.grade == Grade.A

#============================================

def test_bitrate_penalty_clamped() -> None:
	comparison = _comparison(input_bitrate_kbps=1000, output_bitrate_kbps=5000,
		bitrate_delta_kbps=4000, output_codec="hevc", output_matches_target=False)
	score = benchmark.score_comparison(comparison)
	assert score.bitrate_score == 0
	assert score.codec_score == 0
	assert score.total == 0
	assert score.grade == Grade.D

#============================================

def test_confidence_all_indicators() -> None:
	comparison = _comparison(input_bitrate_kbps=4000, output_bitrate_kbps=4000,
		bitrate_delta_kbps=0, output_codec="h264", psnr_db=41.2, ssim=0.98)
	confidence = benchmark.estimate_confidence(comparison)
	assert confidence.value == 1.0
	assert confidence.label == ConfidenceLabel.HIGH

#============================================

def test_confidence_resolution_only() -> None:
	confidence = benchmark.estimate_confidence(_comparison())
	assert confidence.value == 0.35
	assert confidence.label == ConfidenceLabel.LOW

#============================================

def test_confidence_medium() -> None:
	comparison = _comparison(psnr_db=38.0, ssim=0.95)
	confidence = benchmark.estimate_confidence(comparison)
	assert confidence.value == 0.75
	assert confidence.label == ConfidenceLabel.MEDIUM

#============================================

@pytest.mark.parametrize(
	("overrides", "value", "label"),
	[
		# resolution + bitrate delta sits exactly on the medium threshold
		({'bitrate_delta_kbps': 0}, 0.55, ConfidenceLabel.MEDIUM),
		# resolution + psnr + ssim + codec sits exactly on the high threshold
		({'psnr_db': 40.0, 'ssim': 0.97, 'output_codec': "h264"}, 0.8,
			ConfidenceLabel.HIGH),
		({'output_matches_target': False, 'psnr_db': 40.0, 'ssim': 0.97,
			'output_codec': "h264"}, 0.45, ConfidenceLabel.LOW),
		({'output_matches_target': False, 'bitrate_delta_kbps': 0, 'psnr_db': 40.0,
			'ssim': 0.97}, 0.6, ConfidenceLabel.MEDIUM),
	],
)
def test_confidence_threshold_boundaries(overrides, value, label) -> None:
	confidence = benchmark.estimate_confidence(_comparison(**overrides))
	assert confidence.value == value
	assert confidence.label == label

#============================================

def test_benchmark_bundle() -> None:
	result = benchmark.benchmark(_comparison())
	data = result.to_dict()
	assert data['benchmark_version'] == "v1"
	assert data['score']['grade'] == "B"
	assert data['export'] is None
	assert 0 <= data['confidence']['value'] <= 1
