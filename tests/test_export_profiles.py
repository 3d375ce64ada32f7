#!/usr/bin/env python3

"""
Tests for export profile loading and selection.
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
from passepartoutlib.core import export_profiles
from passepartoutlib.core.contracts import Mode, Orientation, Surface
from passepartoutlib.core.utils import ConfigError

#============================================

def _default_data() -> dict:
	with open(export_profiles.DEFAULT_EXPORT_PROFILES_PATH, 'r', encoding='utf-8') as handle:
		return yaml.safe_load(handle)

#============================================

class ExportProfilesLoaderTest(unittest.TestCase):
	#============================================
	def _load_modified(self, mutate):
		data = _default_data()
		mutate(data)
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "export_profiles.yaml")
			with open(path, 'w', encoding='utf-8') as handle:
				yaml.safe_dump(data, handle)
			return export_profiles.ExportProfilesLoader(path).load()

	#============================================
	def _assert_key_path(self, mutate, key_path: str) -> None:
		with self.assertRaises(ConfigError) as context:
			self._load_modified(mutate)
		self.assertEqual(context.exception.key_path, key_path)
		self.assertIn(key_path, str(context.exception))

	#============================================
	def test_default_profiles_load(self) -> None:
		profiles = export_profiles.ExportProfilesLoader().load()
		self.assertEqual(profiles.version, "1.0.0")
		with self.assertRaises(TypeError):
			profiles.image[Mode.RELIABLE] = {}

	#============================================
	def test_missing_orientation(self) -> None:
		def mutate(data):
			del data['image']['reliable']['feed']['portrait']
		self._assert_key_path(mutate, "image.reliable.feed.portrait")

	#============================================
	def test_missing_video_surface(self) -> None:
		def mutate(data):
			del data['video']['experimental']['story']
		self._assert_key_path(mutate, "video.experimental.story")

	#============================================
	def test_quality_above_pillow_range(self) -> None:
		def mutate(data):
			data['image']['reliable']['feed']['square']['quality_default'] = 100
		self._assert_key_path(mutate, "image.reliable.feed.square.quality_default")

	#============================================
	def test_boolean_quality_rejected(self) -> None:
		def mutate(data):
			data['image']['experimental']['reel']['quality_default'] = True
		self._assert_key_path(mutate, "image.experimental.reel.quality_default")

	#============================================
	def test_crf_out_of_range(self) -> None:
		def mutate(data):
			data['video']['reliable']['reel']['crf_default'] = 52
		self._assert_key_path(mutate, "video.reliable.reel.crf_default")

	#============================================
	def test_empty_codec_string(self) -> None:
		def mutate(data):
			data['video']['reliable']['story']['ffmpeg_video_codec'] = " "
		self._assert_key_path(mutate, "video.reliable.story.ffmpeg_video_codec")

	#============================================
	def test_strip_audio_must_be_boolean(self) -> None:
		def mutate(data):
			data['video']['reliable']['feed']['landscape']['strip_audio'] = "yes"
		self._assert_key_path(mutate, "video.reliable.feed.landscape.strip_audio")

	#============================================
	def test_duplicate_profile_id(self) -> None:
		def mutate(data):
			data['image']['experimental']['story']['profile_id'] = "img_reliable_story_v1"
		with self.assertRaises(ConfigError) as context:
			self._load_modified(mutate)
		self.assertEqual(context.exception.key_path, "image.experimental.story.profile_id")
		self.assertIn("image.reliable.story", str(context.exception))

	#============================================
	def test_missing_file(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			with self.assertRaises(ConfigError):
				export_profiles.load_export_profiles(os.path.join(temp_dir, "absent.yaml"))

	#============================================
	def test_tab_indented_json_accepted(self) -> None:
		data = _default_data()
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "export_profiles.json")
			with open(path, 'w', encoding='utf-8') as handle:
				handle.write(json.dumps(data, indent="\t"))
			profiles = export_profiles.ExportProfilesLoader(path).load()
		self.assertEqual(profiles.version, "1.0.0")

#============================================

class ExportProfileSelectionTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		self.profiles = export_profiles.ExportProfilesLoader().load()

	#============================================
	def test_feed_image_by_orientation(self) -> None:
		profile = export_profiles.select_image_profile(self.profiles, Mode.RELIABLE,
			Surface.FEED, Orientation.LANDSCAPE)
		self.assertEqual(profile.profile_id, "img_reliable_feed_landscape_v1")
		self.assertEqual(profile.quality_default, 95)

	#============================================
	def test_reel_video_ignores_orientation(self) -> None:
		for orientation in Orientation:
			profile = export_profiles.select_video_profile(self.profiles, Mode.RELIABLE,
				Surface.REEL, orientation)
			self.assertEqual(profile.profile_id, "vid_reliable_reel_v1")
		self.assertEqual(profile.crf_default, 23)
		self.assertEqual(profile.ffmpeg_video_codec, "libx264")
		self.assertEqual(profile.output_codec, "h264")
		self.assertTrue(profile.strip_audio)

	#============================================
	def test_experimental_story_image(self) -> None:
		profile = export_profiles.select_image_profile(self.profiles, Mode.EXPERIMENTAL,
			Surface.STORY, Orientation.PORTRAIT)
		self.assertEqual(profile.profile_id, "img_experimental_story_v1")

	#============================================
	def test_override_range_check(self) -> None:
		self.assertEqual(export_profiles.check_int_range(0, 0, 51, "crf"), 0)
		with self.assertRaises(ConfigError) as context:
			export_profiles.check_int_range(52, 0, 51, "crf")
		self.assertEqual(context.exception.key_path, "crf")
		with self.assertRaises(ConfigError):
			export_profiles.check_int_range(False, 1, 95, "quality")

#============================================

if __name__ == '__main__':
	unittest.main()
