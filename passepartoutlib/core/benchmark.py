#!/usr/bin/env python3

"""
Score an export from its before/after comparison.

The score rewards hitting the target resolution, keeping the bitrate close to
the source and staying on the baseline codec. The confidence value measures
how much of that score rests on measured data rather than neutral defaults.
"""

# Standard Library
from decimal import Decimal
from fractions import Fraction

# local repo modules
from passepartoutlib.core import utils
from passepartoutlib.core.contracts import BASELINE_CODEC, BenchmarkOutput
from passepartoutlib.core.contracts import Comparison, Confidence, ConfidenceLabel
from passepartoutlib.core.contracts import ExportOutput, Grade, Score

#============================================

RESOLUTION_POINTS = 50
BITRATE_POINTS = 40
BITRATE_NEUTRAL_POINTS = 20
CODEC_POINTS = 10

GRADE_THRESHOLDS = (
	(85, Grade.A),
	(70, Grade.B),
	(50, Grade.C),
)

CONFIDENCE_WEIGHTS = {
	'resolution_match': Decimal("0.35"),
	'bitrate_delta': Decimal("0.20"),
	'psnr': Decimal("0.20"),
	'ssim': Decimal("0.20"),
	'output_codec': Decimal("0.05"),
}

CONFIDENCE_THRESHOLDS = (
	(Decimal("0.8"), ConfidenceLabel.HIGH),
	(Decimal("0.55"), ConfidenceLabel.MEDIUM),
)

#============================================

def grade_from_score(total: int) -> Grade:
	for (threshold, grade) in GRADE_THRESHOLDS:
		if total >= threshold:
			return grade
	return Grade.D

#============================================

def bitrate_score(comparison: Comparison) -> int:
	input_bitrate = comparison.input_bitrate_kbps
	delta = comparison.bitrate_delta_kbps
	if input_bitrate is None or delta is None or input_bitrate <= 0:
		return BITRATE_NEUTRAL_POINTS
	penalty = Fraction(str(abs(delta))) / Fraction(str(input_bitrate)) * BITRATE_POINTS
	return utils.clamp(BITRATE_POINTS - utils.round_half_up(penalty), 0, BITRATE_POINTS)

#============================================

def score_comparison(comparison: Comparison) -> Score:
	resolution_points = RESOLUTION_POINTS if comparison.output_matches_target else 0
	bitrate_points = bitrate_score(comparison)
	codec = comparison.output_codec
	codec_points = CODEC_POINTS if codec is None or codec == BASELINE_CODEC else 0
	total = utils.clamp(resolution_points + bitrate_points + codec_points, 0, 100)
	return Score(
		total=total,
		grade=grade_from_score(total),
		resolution_score=resolution_points,
		bitrate_score=bitrate_points,
		codec_score=codec_points,
	)

#============================================

def estimate_confidence(comparison: Comparison) -> Confidence:
	indicators = {
		'resolution_match': comparison.output_matches_target,
		'bitrate_delta': comparison.bitrate_delta_kbps is not None,
		'psnr': comparison.psnr_db is not None,
		'ssim': comparison.ssim is not None,
		'output_codec': comparison.output_codec is not None,
	}
	value = Decimal(0)
	for (name, present) in indicators.items():
		if present:
			value += CONFIDENCE_WEIGHTS[name]
	value = utils.clamp(value, Decimal(0), Decimal(1)).quantize(Decimal("0.001"))
	label = ConfidenceLabel.LOW
	for (threshold, candidate) in CONFIDENCE_THRESHOLDS:
		if value >= threshold:
			label = candidate
			break
	return Confidence(value=float(value), label=label)

#============================================

def benchmark(comparison: Comparison, export: ExportOutput = None) -> BenchmarkOutput:
	"""
	Score a comparison and estimate confidence.

	Args:
		comparison: Input/output comparison record.
		export: Optional record of the export that produced the output.

	Returns:
		BenchmarkOutput: Comparison, score and confidence.
	"""
	return BenchmarkOutput(
		comparison=comparison,
		score=score_comparison(comparison),
		confidence=estimate_confidence(comparison),
		export=export,
	)
