#!/usr/bin/env python3

"""
Export encoder settings keyed by mode, surface and orientation.

The layout mirrors the ruleset profiles table: every mode carries a feed
table by orientation plus single entries for story and reel.
"""

# Standard Library
import os
from types import MappingProxyType

# local repo modules
from passepartoutlib.core import utils
from passepartoutlib.core.contracts import ExportProfiles, ImageExportProfile
from passepartoutlib.core.contracts import Mode, Orientation, Surface, VideoExportProfile
from passepartoutlib.core.utils import ConfigError

#============================================

DEFAULT_EXPORT_PROFILES_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__),
	"..", "config", "export_profiles.v1.yaml"))

# Pillow JPEG quality range; values above 95 only grow the file
QUALITY_RANGE = (1, 95)
# libx264 constant rate factor range
CRF_RANGE = (0, 51)

VIDEO_STRING_FIELDS = ('ffmpeg_video_codec', 'output_codec', 'pix_fmt', 'movflags')

#============================================

def _select(table, mode: Mode, surface: Surface, orientation: Orientation):
	mode_table = table[Mode(mode)]
	if Surface(surface) == Surface.FEED:
		return mode_table[Surface.FEED][Orientation(orientation)]
	return mode_table[Surface(surface)]

#============================================

def select_image_profile(profiles: ExportProfiles, mode: Mode, surface: Surface,
	orientation: Orientation) -> ImageExportProfile:
	return _select(profiles.image, mode, surface, orientation)

#============================================

def select_video_profile(profiles: ExportProfiles, mode: Mode, surface: Surface,
	orientation: Orientation) -> VideoExportProfile:
	return _select(profiles.video, mode, surface, orientation)

#============================================

def check_int_range(value, low: int, high: int, name: str) -> int:
	"""
	Validate an integer override such as --quality or --crf.
	"""
	if isinstance(value, bool) or not isinstance(value, int) or value < low or value > high:
		raise ConfigError(f"{name} must be an integer {low}-{high}, got {value!r}",
			key_path=name)
	return value

#============================================

class ExportProfilesLoader():
	def __init__(self, profiles_file: str = None):
		self.profiles_file = profiles_file or DEFAULT_EXPORT_PROFILES_PATH
		self.seen_ids = {}

	#============================
	def load(self) -> ExportProfiles:
		data = utils.load_data_file(self.profiles_file, "export profiles")
		if not isinstance(data, dict):
			raise ConfigError(f"invalid export profiles {self.profiles_file}: "
				"top level must be a mapping")
		version = data.get('version')
		if not isinstance(version, str) or version.strip() == "":
			self._fail("version", "must be a non-empty string")
		image = self._parse_kind(data.get('image'), "image", self._parse_image)
		video = self._parse_kind(data.get('video'), "video", self._parse_video)
		return ExportProfiles(
			version=version,
			image=MappingProxyType(image),
			video=MappingProxyType(video),
			source_path=self.profiles_file,
		)

	#============================
	def _fail(self, key_path: str, problem: str) -> None:
		raise ConfigError(f"invalid export profiles {self.profiles_file}: {key_path} {problem}",
			key_path=key_path)

	#============================
	def _parse_kind(self, table, kind: str, parse_entry) -> dict:
		if not isinstance(table, dict):
			self._fail(kind, "must be a mapping")
		parsed = {}
		for mode in Mode:
			key_path = f"{kind}.{mode.value}"
			mode_table = table.get(mode.value)
			if not isinstance(mode_table, dict):
				self._fail(key_path, "is missing")
			feed_table = mode_table.get(Surface.FEED.value)
			if not isinstance(feed_table, dict):
				self._fail(f"{key_path}.feed", "is missing")
			feed = {}
			for orientation in Orientation:
				entry_path = f"{key_path}.feed.{orientation.value}"
				feed[orientation] = parse_entry(
					self._entry(feed_table.get(orientation.value), entry_path), entry_path)
			parsed[mode] = {Surface.FEED: MappingProxyType(feed)}
			for surface in (Surface.STORY, Surface.REEL):
				entry_path = f"{key_path}.{surface.value}"
				parsed[mode][surface] = parse_entry(
					self._entry(mode_table.get(surface.value), entry_path), entry_path)
			parsed[mode] = MappingProxyType(parsed[mode])
		return parsed

	#============================
	def _entry(self, entry, key_path: str) -> dict:
		if entry is None:
			self._fail(key_path, "is missing")
		if not isinstance(entry, dict):
			self._fail(key_path, "must be a mapping")
		return entry

	#============================
	def _string(self, entry: dict, field_name: str, key_path: str) -> str:
		value = entry.get(field_name)
		if not isinstance(value, str) or value.strip() == "":
			self._fail(f"{key_path}.{field_name}", "must be a non-empty string")
		return value

	#============================
	def _integer(self, entry: dict, field_name: str, key_path: str, bounds: tuple) -> int:
		value = entry.get(field_name)
		(low, high) = bounds
		# bool is an int subclass
		if isinstance(value, bool) or not isinstance(value, int) or value < low or value > high:
			self._fail(f"{key_path}.{field_name}", f"must be an integer {low}-{high}")
		return value

	#============================
	def _profile_id(self, entry: dict, key_path: str) -> str:
		profile_id = self._string(entry, 'profile_id', key_path)
		owner = self.seen_ids.get(profile_id)
		if owner is not None:
			self._fail(f"{key_path}.profile_id", f"duplicates {profile_id!r} from {owner}")
		self.seen_ids[profile_id] = key_path
		return profile_id

	#============================
	def _parse_image(self, entry: dict, key_path: str) -> ImageExportProfile:
		return ImageExportProfile(
			profile_id=self._profile_id(entry, key_path),
			quality_default=self._integer(entry, 'quality_default', key_path, QUALITY_RANGE),
		)

	#============================
	def _parse_video(self, entry: dict, key_path: str) -> VideoExportProfile:
		profile_id = self._profile_id(entry, key_path)
		strings = {name: self._string(entry, name, key_path) for name in VIDEO_STRING_FIELDS}
		strip_audio = entry.get('strip_audio')
		if not isinstance(strip_audio, bool):
			self._fail(f"{key_path}.strip_audio", "must be a boolean")
		return VideoExportProfile(
			profile_id=profile_id,
			crf_default=self._integer(entry, 'crf_default', key_path, CRF_RANGE),
			strip_audio=strip_audio,
			**strings,
		)

#============================================

def load_export_profiles(profiles_file: str = None) -> ExportProfiles:
	"""
	Load and validate an export profiles file.

	Args:
		profiles_file: YAML (or JSON) path; the packaged file when None.

	Returns:
		ExportProfiles: Read-only profile tables.
	"""
	profiles = ExportProfilesLoader(profiles_file).load()
	utils.log(f"loaded export profiles {profiles.version} from {profiles.source_path}")
	return profiles
