#!/usr/bin/env python3

"""
Records and closed value sets shared by the planning and validation engine.

Every record is a frozen dataclass with a to_dict() that returns plain
JSON/YAML-safe values (enumerations become their string value).
"""

# Standard Library
import dataclasses
import enum
from types import MappingProxyType

#============================================

class Choice(str, enum.Enum):
	def __str__(self) -> str:
		return self.value

	@classmethod
	def values(cls) -> tuple:
		return tuple(member.value for member in cls)

	@classmethod
	def parse(cls, raw, field_name: str):
		"""
		Convert a raw string into a member, raising with the allowed values.
		"""
		try:
			return cls(raw)
		except ValueError:
			allowed = "|".join(cls.values())
			raise ValueError(f"{field_name} must be {allowed}, got {raw!r}") from None

#============================================

class Mode(Choice):
	RELIABLE = "reliable"
	EXPERIMENTAL = "experimental"

class Surface(Choice):
	FEED = "feed"
	STORY = "story"
	REEL = "reel"

class Orientation(Choice):
	PORTRAIT = "portrait"
	SQUARE = "square"
	LANDSCAPE = "landscape"

class Workflow(Choice):
	APP_DIRECT = "app_direct"
	API_SCHEDULER = "api_scheduler"
	UNKNOWN = "unknown"

class RiskLevel(Choice):
	LOW = "low"
	MEDIUM = "medium"
	HIGH = "high"

	@property
	def rank(self) -> int:
		return ("low", "medium", "high").index(self.value)

class TierName(Choice):
	UPSCALE = "tier_upscale"
	PRESERVE = "tier_preserve"
	DOWNSCALE = "tier_downscale"
	ASPECT_CORRECTION = "tier_aspect_correction"

class Grade(Choice):
	A = "A"
	B = "B"
	C = "C"
	D = "D"

class ConfidenceLabel(Choice):
	LOW = "low"
	MEDIUM = "medium"
	HIGH = "high"

#============================================

FEED_COMPAT = "feed_compat"
FEED_APP_DIRECT = "feed_app_direct"
BASELINE_CODEC = "h264"

#============================================

def _plain(value):
	if isinstance(value, enum.Enum):
		return value.value
	if dataclasses.is_dataclass(value) and not isinstance(value, type):
		return value.to_dict()
	if isinstance(value, (dict, MappingProxyType)):
		return {str(_plain(key)): _plain(item) for key, item in value.items()}
	if isinstance(value, (list, tuple)):
		return [_plain(item) for item in value]
	return value

#============================================

class Record():
	def to_dict(self) -> dict:
		return {field.name: _plain(getattr(self, field.name))
			for field in dataclasses.fields(self)}

#============================================

@dataclasses.dataclass(frozen=True)
class ProfileRule(Record):
	resolution: str
	profile_id: str
	reason: str
	risk_level: RiskLevel

@dataclasses.dataclass(frozen=True)
class Ruleset(Record):
	version: str
	# mode -> {'feed': {orientation: ProfileRule}, 'story': ProfileRule, 'reel': ProfileRule}
	profiles: MappingProxyType
	canvas_profiles: MappingProxyType
	app_direct_only_profiles: tuple
	default_style: str
	styles: MappingProxyType
	source_path: str = None

@dataclasses.dataclass(frozen=True)
class ImageExportProfile(Record):
	profile_id: str
	quality_default: int

@dataclasses.dataclass(frozen=True)
class VideoExportProfile(Record):
	profile_id: str
	ffmpeg_video_codec: str
	output_codec: str
	pix_fmt: str
	movflags: str
	crf_default: int
	strip_audio: bool

@dataclasses.dataclass(frozen=True)
class ExportProfiles(Record):
	version: str
	# mode -> {'feed': {orientation: profile}, 'story': profile, 'reel': profile}
	image: MappingProxyType
	video: MappingProxyType
	source_path: str = None

@dataclasses.dataclass(frozen=True)
class RecommendInput(Record):
	mode: Mode
	surface: Surface
	orientation: Orientation
	workflow: Workflow = Workflow.UNKNOWN
	white_canvas: bool = False
	canvas_profile: str = None
	canvas_style: str = None
	source_ratio: float = None

@dataclasses.dataclass(frozen=True)
class Margins(Record):
	left: int
	top: int
	right: int
	bottom: int

@dataclasses.dataclass(frozen=True)
class WhiteCanvasOutput(Record):
	enabled: bool
	profile: str = None
	style: str = None
	margins: Margins = None
	contain_only: bool = False
	no_crop: bool = False

@dataclasses.dataclass(frozen=True)
class RecommendationOutput(Record):
	selected_mode: Mode
	selected_profile: str
	target_resolution: str
	reason: str
	risk_level: RiskLevel
	workflow_note: str
	white_canvas: WhiteCanvasOutput

@dataclasses.dataclass(frozen=True)
class TierOutput(Record):
	name: TierName
	reason: str
	risk_level: RiskLevel

@dataclasses.dataclass(frozen=True)
class MediaInspection(Record):
	path: str
	width: int
	height: int
	aspect_ratio: str
	orientation: Orientation
	colorspace: str
	codec: str = None
	fps: float = 0
	duration_seconds: float = None
	bitrate_kbps: int = None
	has_audio: bool = False
	audio_codec: str = None

	@property
	def is_still(self) -> bool:
		return self.codec is None

	@property
	def resolution(self) -> str:
		return f"{self.width}x{self.height}"

@dataclasses.dataclass(frozen=True)
class ExportOutput(Record):
	input_path: str
	output_path: str
	kind: str
	selected_profile: str
	target_resolution: str
	white_canvas_enabled: bool
	fit_filter: str
	export_profile_id: str = None
	quality_used: int = None
	crf_used: int = None
	video_codec: str = None
	fps: float = None
	audio_stripped: bool = None

@dataclasses.dataclass(frozen=True)
class ObjectiveMetrics(Record):
	psnr_db: float = None
	ssim: float = None
	note: str = None

@dataclasses.dataclass(frozen=True)
class Comparison(Record):
	input_resolution: str
	output_resolution: str
	target_resolution: str
	output_matches_target: bool
	input_bitrate_kbps: float = None
	output_bitrate_kbps: float = None
	bitrate_delta_kbps: float = None
	input_colorspace: str = None
	output_colorspace: str = None
	input_has_audio: bool = False
	output_has_audio: bool = False
	output_codec: str = None
	psnr_db: float = None
	ssim: float = None
	notes: tuple = ()

@dataclasses.dataclass(frozen=True)
class Score(Record):
	total: int
	grade: Grade
	resolution_score: int
	bitrate_score: int
	codec_score: int

@dataclasses.dataclass(frozen=True)
class Confidence(Record):
	value: float
	label: ConfidenceLabel

@dataclasses.dataclass(frozen=True)
class BenchmarkOutput(Record):
	comparison: Comparison
	score: Score
	confidence: Confidence
	export: ExportOutput = None
	benchmark_version: str = "v1"

#============================================

@dataclasses.dataclass(frozen=True)
class MatrixCase(Record):
	id: str
	file: str
	out: str
	mode: Mode
	surface: Surface
	workflow: Workflow = None
	white_canvas: bool = None
	canvas_profile: str = None
	canvas_style: str = None

@dataclasses.dataclass(frozen=True)
class CaseResult(Record):
	id: str
	status: str
	duration_ms: int
	benchmark: BenchmarkOutput = None
	error: str = None

	@property
	def ok(self) -> bool:
		return self.status == "ok"

@dataclasses.dataclass(frozen=True)
class MatrixSummary(Record):
	avg_total_score: float
	avg_confidence: float
	grade_counts: MappingProxyType
	confidence_counts: MappingProxyType

@dataclasses.dataclass(frozen=True)
class MatrixOutput(Record):
	duration_ms: int
	cases_in_file: int
	cases_total: int
	cases_succeeded: int
	cases_failed: int
	cases_skipped: int
	selected_case_ids: tuple
	summary: MatrixSummary
	results: tuple
	matrix_version: str = "v1"
