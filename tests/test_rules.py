#!/usr/bin/env python3

"""
Tests for ruleset loading and profile lookup.
"""

# Standard Library
import json
import os
import sys
import tempfile
import unittest

# PIP3 modules
import yaml

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from passepartoutlib.core import rules
from passepartoutlib.core.contracts import Mode, Orientation, RiskLevel, Surface
from passepartoutlib.core.utils import ConfigError

#============================================

def _default_data() -> dict:
	with open(rules.DEFAULT_RULESET_PATH, 'r', encoding='utf-8') as handle:
		return yaml.safe_load(handle)

#============================================

def _write_yaml(path: str, data) -> None:
	with open(path, 'w', encoding='utf-8') as handle:
		yaml.safe_dump(data, handle)
	return

#============================================

class RulesetLoaderTest(unittest.TestCase):
	#============================================
	def _load_modified(self, mutate):
		data = _default_data()
		mutate(data)
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "ruleset.yaml")
			_write_yaml(path, data)
			return rules.RulesetLoader(path).load()

	#============================================
	def test_default_ruleset_loads(self) -> None:
		"""Packaged ruleset passes validation and is read-only."""
		ruleset = rules.RulesetLoader().load()
		self.assertEqual(ruleset.version, "1.0.0")
		self.assertIn("feed_compat", ruleset.canvas_profiles)
		self.assertEqual(ruleset.app_direct_only_profiles, ("feed_app_direct",))
		self.assertEqual(ruleset.default_style, "gallery_clean")
		with self.assertRaises(TypeError):
			ruleset.styles["new_style"] = 0.5

	#============================================
	def test_missing_orientation_reports_key_path(self) -> None:
		def mutate(data):
			del data['profiles']['reliable']['feed']['portrait']
		with self.assertRaises(ConfigError) as context:
			self._load_modified(mutate)
		self.assertEqual(context.exception.key_path, "profiles.reliable.feed.portrait")
		self.assertIn("profiles.reliable.feed.portrait", str(context.exception))

	#============================================
	def test_missing_surface_rule(self) -> None:
		def mutate(data):
			del data['profiles']['experimental']['reel']
		with self.assertRaises(ConfigError) as context:
			self._load_modified(mutate)
		self.assertEqual(context.exception.key_path, "profiles.experimental.reel")

	#============================================
	def test_missing_version(self) -> None:
		def mutate(data):
			del data['version']
		with self.assertRaises(ConfigError) as context:
			self._load_modified(mutate)
		self.assertEqual(context.exception.key_path, "version")

	#============================================
	def test_unknown_app_direct_only_profile(self) -> None:
		def mutate(data):
			data['white_canvas']['app_direct_only_profiles'] = ["feed_missing"]
		with self.assertRaises(ConfigError) as context:
			self._load_modified(mutate)
		self.assertEqual(context.exception.key_path,
			"white_canvas.app_direct_only_profiles[0]")

	#============================================
	def test_empty_canvas_profiles(self) -> None:
		def mutate(data):
			data['white_canvas']['profiles'] = {}
		with self.assertRaises(ConfigError):
			self._load_modified(mutate)

	#============================================
	def test_non_numeric_style_ratio(self) -> None:
		def mutate(data):
			data['white_canvas']['styles']['polaroid_classic']['extra_bottom_ratio'] = "wide"
		with self.assertRaises(ConfigError) as context:
			self._load_modified(mutate)
		self.assertEqual(context.exception.key_path,
			"white_canvas.styles.polaroid_classic.extra_bottom_ratio")

	#============================================
	def test_boolean_style_ratio_rejected(self) -> None:
		def mutate(data):
			data['white_canvas']['styles']['gallery_clean']['extra_bottom_ratio'] = True
		with self.assertRaises(ConfigError):
			self._load_modified(mutate)

	#============================================
	def test_bad_resolution(self) -> None:
		def mutate(data):
			data['profiles']['reliable']['story']['resolution'] = "1080by1920"
		with self.assertRaises(ConfigError) as context:
			self._load_modified(mutate)
		self.assertEqual(context.exception.key_path, "profiles.reliable.story.resolution")

	#============================================
	def test_missing_file(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			with self.assertRaises(ConfigError):
				rules.RulesetLoader(os.path.join(temp_dir, "absent.yaml")).load()

	#============================================
	def test_json_ruleset_accepted(self) -> None:
		data = _default_data()
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "ruleset.json")
			with open(path, 'w', encoding='utf-8') as handle:
				json.dump(data, handle)
			ruleset = rules.RulesetLoader(path).load()
		self.assertEqual(ruleset.version, "1.0.0")

	#============================================
	def test_tab_indented_json_ruleset_accepted(self) -> None:
		"""Tabs are legal JSON whitespace but not legal YAML indentation."""
		data = _default_data()
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "ruleset.json")
			with open(path, 'w', encoding='utf-8') as handle:
				handle.write(json.dumps(data, indent="\t"))
			ruleset = rules.RulesetLoader(path).load()
		self.assertEqual(ruleset.version, "1.0.0")
		self.assertIn("feed_app_direct", ruleset.canvas_profiles)

	#============================================
	def test_malformed_json_ruleset(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "ruleset.json")
			with open(path, 'w', encoding='utf-8') as handle:
				handle.write('{"version": "1.0.0",')
			with self.assertRaises(ConfigError):
				rules.RulesetLoader(path).load()

	#============================================
	def test_missing_feed_compat_profile(self) -> None:
		"""feed_compat is the default canvas profile, so it must be configured."""
		def mutate(data):
			del data['white_canvas']['profiles']['feed_compat']
		with self.assertRaises(ConfigError) as context:
			self._load_modified(mutate)
		self.assertEqual(context.exception.key_path, "white_canvas.profiles.feed_compat")

#============================================

class ProfileLookupTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		self.ruleset = rules.RulesetLoader().load()

	#============================================
	def test_feed_dispatches_on_orientation(self) -> None:
		rule = rules.select_profile_rule(self.ruleset, Mode.RELIABLE, Surface.FEED,
			Orientation.PORTRAIT)
		self.assertEqual(rule.resolution, "1080x1350")
		self.assertEqual(rule.risk_level, RiskLevel.LOW)
		rule = rules.select_profile_rule(self.ruleset, Mode.RELIABLE, Surface.FEED,
			Orientation.LANDSCAPE)
		self.assertEqual(rule.resolution, "1080x566")

	#============================================
	def test_story_ignores_orientation(self) -> None:
		for orientation in Orientation:
			rule = rules.select_profile_rule(self.ruleset, Mode.EXPERIMENTAL,
				Surface.STORY, orientation)
			self.assertEqual(rule.resolution, "1440x2560")

	#============================================
	def test_parse_resolution(self) -> None:
		self.assertEqual(rules.parse_resolution("1080x1350"), (1080, 1350))
		for raw in ("1080", "0x10", "axb", "10x-1"):
			with self.assertRaises(RuntimeError):
				rules.parse_resolution(raw)

#============================================

if __name__ == '__main__':
	unittest.main()
