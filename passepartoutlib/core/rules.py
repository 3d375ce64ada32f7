#!/usr/bin/env python3

import math
import os
import re
from types import MappingProxyType
from passepartoutlib.core import utils
from passepartoutlib.core.contracts import FEED_COMPAT, Mode, Orientation, ProfileRule
from passepartoutlib.core.contracts import RiskLevel, Ruleset, Surface
from passepartoutlib.core.utils import ConfigError

#============================================

DEFAULT_RULESET_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__),
	"..", "config", "ruleset.v1.yaml"))

RESOLUTION_PATTERN = re.compile(r"^([0-9]+)x([0-9]+)$")

#============================================

def parse_resolution(resolution: str) -> tuple:
	"""
	Split a WxH resolution string.

	Args:
		resolution: Text such as "1080x1350".

	Returns:
		tuple: (width, height) as ints.
	"""
	match = RESOLUTION_PATTERN.match(str(resolution))
	if match is None:
		raise RuntimeError(f"invalid resolution: {resolution}")
	width = int(match.group(1))
	height = int(match.group(2))
	if width <= 0 or height <= 0:
		raise RuntimeError(f"invalid resolution: {resolution}")
	return (width, height)

#============================================

def format_resolution(width: int, height: int) -> str:
	return f"{width}x{height}"

#============================================

def select_profile_rule(ruleset: Ruleset, mode: Mode, surface: Surface,
	orientation: Orientation) -> ProfileRule:
	mode_rules = ruleset.profiles[Mode(mode)]
	if Surface(surface) == Surface.FEED:
		return mode_rules[Surface.FEED][Orientation(orientation)]
	return mode_rules[Surface(surface)]

#============================================

class RulesetLoader():
	def __init__(self, ruleset_file: str = None):
		self.ruleset_file = ruleset_file or DEFAULT_RULESET_PATH

	#============================
	def load(self) -> Ruleset:
		data = self._load_data()
		version = data.get('version')
		if not isinstance(version, str) or version.strip() == "":
			self._fail("version", "must be a non-empty string")
		profiles = self._parse_profiles(data.get('profiles'))
		white_canvas = data.get('white_canvas')
		if not isinstance(white_canvas, dict):
			self._fail("white_canvas", "must be a mapping")
		canvas_profiles = self._parse_canvas_profiles(white_canvas.get('profiles'))
		app_direct_only = self._parse_app_direct_only(
			white_canvas.get('app_direct_only_profiles', []), canvas_profiles)
		styles = self._parse_styles(white_canvas.get('styles'))
		default_style = white_canvas.get('default_style')
		if not isinstance(default_style, str) or default_style not in styles:
			self._fail("white_canvas.default_style",
				f"must name a configured style ({', '.join(sorted(styles))})")
		return Ruleset(
			version=version,
			profiles=MappingProxyType(profiles),
			canvas_profiles=MappingProxyType(canvas_profiles),
			app_direct_only_profiles=app_direct_only,
			default_style=default_style,
			styles=MappingProxyType(styles),
			source_path=self.ruleset_file,
		)

	#============================
	def _fail(self, key_path: str, problem: str) -> None:
		raise ConfigError(f"invalid ruleset {self.ruleset_file}: {key_path} {problem}",
			key_path=key_path)

	#============================
	def _load_data(self) -> dict:
		data = utils.load_data_file(self.ruleset_file, "ruleset")
		if not isinstance(data, dict):
			raise ConfigError(f"invalid ruleset {self.ruleset_file}: top level must be a mapping")
		return data

	#============================
	def _parse_profiles(self, profiles) -> dict:
		if not isinstance(profiles, dict):
			self._fail("profiles", "must be a mapping")
		parsed = {}
		for mode in Mode:
			mode_rules = profiles.get(mode.value)
			key_path = f"profiles.{mode.value}"
			if not isinstance(mode_rules, dict):
				self._fail(key_path, "is missing")
			feed_rules = mode_rules.get(Surface.FEED.value)
			if not isinstance(feed_rules, dict):
				self._fail(f"{key_path}.feed", "is missing")
			feed = {}
			for orientation in Orientation:
				feed[orientation] = self._parse_rule(feed_rules.get(orientation.value),
					f"{key_path}.feed.{orientation.value}")
			parsed[mode] = {Surface.FEED: MappingProxyType(feed)}
			for surface in (Surface.STORY, Surface.REEL):
				parsed[mode][surface] = self._parse_rule(mode_rules.get(surface.value),
					f"{key_path}.{surface.value}")
			parsed[mode] = MappingProxyType(parsed[mode])
		return parsed

	#============================
	def _parse_rule(self, rule, key_path: str) -> ProfileRule:
		if rule is None:
			self._fail(key_path, "is missing")
		if not isinstance(rule, dict):
			self._fail(key_path, "must be a mapping")
		resolution = self._parse_resolution_value(rule.get('resolution'),
			f"{key_path}.resolution")
		profile_id = rule.get('profile_id')
		if not isinstance(profile_id, str) or profile_id.strip() == "":
			self._fail(f"{key_path}.profile_id", "must be a non-empty string")
		reason = rule.get('reason')
		if not isinstance(reason, str) or reason.strip() == "":
			self._fail(f"{key_path}.reason", "must be a non-empty string")
		risk_raw = rule.get('risk_level')
		if risk_raw not in RiskLevel.values():
			self._fail(f"{key_path}.risk_level", "must be low|medium|high")
		return ProfileRule(resolution=resolution, profile_id=profile_id,
			reason=reason, risk_level=RiskLevel(risk_raw))

	#============================
	def _parse_resolution_value(self, value, key_path: str) -> str:
		if not isinstance(value, str):
			self._fail(key_path, "must be a WxH string")
		try:
			(width, height) = parse_resolution(value)
		except RuntimeError:
			self._fail(key_path, f"must be a WxH string with positive sizes, got {value!r}")
		return format_resolution(width, height)

	#============================
	def _parse_canvas_profiles(self, profiles) -> dict:
		if not isinstance(profiles, dict) or len(profiles) == 0:
			self._fail("white_canvas.profiles", "must be a non-empty mapping")
		parsed = {}
		for name in sorted(profiles):
			entry = profiles[name]
			key_path = f"white_canvas.profiles.{name}"
			if not isinstance(entry, dict):
				self._fail(key_path, "must be a mapping")
			parsed[str(name)] = self._parse_resolution_value(entry.get('resolution'),
				f"{key_path}.resolution")
		# default and fallback target for feed requests
		if FEED_COMPAT not in parsed:
			self._fail(f"white_canvas.profiles.{FEED_COMPAT}", "is missing")
		return parsed

	#============================
	def _parse_app_direct_only(self, names, canvas_profiles: dict) -> tuple:
		key_path = "white_canvas.app_direct_only_profiles"
		if names is None:
			return ()
		if not isinstance(names, list):
			self._fail(key_path, "must be a list")
		for index, name in enumerate(names):
			if name not in canvas_profiles:
				self._fail(f"{key_path}[{index}]",
					f"names unknown canvas profile {name!r}")
		return tuple(names)

	#============================
	def _parse_styles(self, styles) -> dict:
		if not isinstance(styles, dict) or len(styles) == 0:
			self._fail("white_canvas.styles", "must be a non-empty mapping")
		parsed = {}
		for name in sorted(styles):
			entry = styles[name]
			key_path = f"white_canvas.styles.{name}.extra_bottom_ratio"
			if not isinstance(entry, dict):
				self._fail(f"white_canvas.styles.{name}", "must be a mapping")
			ratio = entry.get('extra_bottom_ratio', 0.0)
			# bool is an int subclass
			if isinstance(ratio, bool) or not isinstance(ratio, (int, float)):
				self._fail(key_path, "must be a number")
			if not math.isfinite(ratio) or ratio < 0:
				self._fail(key_path, "must be a finite number >= 0")
			parsed[str(name)] = float(ratio)
		return parsed

#============================================

def load_ruleset(ruleset_file: str = None) -> Ruleset:
	"""
	Load and validate a ruleset file.

	Args:
		ruleset_file: YAML (or JSON) path; the packaged ruleset when None.

	Returns:
		Ruleset: Read-only ruleset.
	"""
	ruleset = RulesetLoader(ruleset_file).load()
	utils.log(f"loaded ruleset {ruleset.version} from {ruleset.source_path}")
	return ruleset
