#!/usr/bin/env python3

"""
Tests for the recommendation composer.
"""

# Standard Library
import json
import os
import sys
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from passepartoutlib.core import recommend as recommender
from passepartoutlib.core import rules
from passepartoutlib.core.contracts import Margins, Mode, Orientation
from passepartoutlib.core.contracts import RecommendInput, RiskLevel, Surface, Workflow

#============================================

class RecommendTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		self.ruleset = rules.RulesetLoader().load()

	#============================================
	def _recommend(self, **kwargs):
		return recommender.recommend(RecommendInput(**kwargs), self.ruleset)

	#============================================
	def test_reliable_feed_portrait(self) -> None:
		result = self._recommend(mode=Mode.RELIABLE, surface=Surface.FEED,
			orientation=Orientation.PORTRAIT)
		self.assertEqual(result.target_resolution, "1080x1350")
		self.assertEqual(result.risk_level, RiskLevel.LOW)
		self.assertEqual(result.selected_profile, "reliable_feed_portrait_4x5")
		self.assertFalse(result.white_canvas.enabled)
		self.assertIsNone(result.white_canvas.margins)

	#============================================
	def test_white_canvas_feed_landscape(self) -> None:
		result = self._recommend(mode=Mode.RELIABLE, surface=Surface.FEED,
			orientation=Orientation.LANDSCAPE, white_canvas=True, source_ratio=1.2)
		self.assertEqual(result.target_resolution, "1080x1350")
		self.assertEqual(result.selected_profile,
			"reliable_feed_white_canvas_feed_compat")
		self.assertEqual(result.white_canvas.margins, Margins(43, 216, 43, 216))
		self.assertTrue(result.white_canvas.contain_only)
		self.assertTrue(result.white_canvas.no_crop)
		self.assertEqual(result.risk_level, RiskLevel.LOW)

	#============================================
	def test_app_direct_request_falls_back(self) -> None:
		result = self._recommend(mode=Mode.RELIABLE, surface=Surface.FEED,
			orientation=Orientation.PORTRAIT, workflow=Workflow.API_SCHEDULER,
			white_canvas=True, canvas_profile="feed_app_direct")
		self.assertEqual(result.white_canvas.profile, "feed_compat")
		self.assertEqual(result.target_resolution, "1080x1350")
		self.assertIn("fallback", result.workflow_note)

	#============================================
	def test_app_direct_request_kept(self) -> None:
		result = self._recommend(mode=Mode.RELIABLE, surface=Surface.FEED,
			orientation=Orientation.PORTRAIT, workflow=Workflow.APP_DIRECT,
			white_canvas=True, canvas_profile="feed_app_direct")
		self.assertEqual(result.white_canvas.profile, "feed_app_direct")
		self.assertEqual(result.target_resolution, "1080x1440")

	#============================================
	def test_experimental_risk_escalation(self) -> None:
		feed = self._recommend(mode=Mode.EXPERIMENTAL, surface=Surface.FEED,
			orientation=Orientation.SQUARE, white_canvas=True)
		self.assertEqual(feed.risk_level, RiskLevel.MEDIUM)
		reel = self._recommend(mode=Mode.EXPERIMENTAL, surface=Surface.REEL,
			orientation=Orientation.PORTRAIT, white_canvas=True)
		self.assertEqual(reel.risk_level, RiskLevel.HIGH)
		self.assertEqual(reel.target_resolution, "1440x2560")
		self.assertEqual(reel.white_canvas.profile, "reel_default")

	#============================================
	def test_style_deepens_bottom(self) -> None:
		result = self._recommend(mode=Mode.RELIABLE, surface=Surface.FEED,
			orientation=Orientation.PORTRAIT, white_canvas=True,
			canvas_style="polaroid_classic")
		margins = result.white_canvas.margins
		self.assertEqual((margins.left, margins.top, margins.right), (54, 54, 54))
		self.assertEqual(margins.bottom, 54 + 108)

	#============================================
	def test_stable_json_is_deterministic(self) -> None:
		kwargs = dict(mode=Mode.EXPERIMENTAL, surface=Surface.STORY,
			orientation=Orientation.LANDSCAPE, white_canvas=True,
			canvas_style="polaroid_classic")
		first = recommender.to_stable_json(self._recommend(**kwargs))
		second = recommender.to_stable_json(self._recommend(**kwargs))
		self.assertEqual(first, second)
		data = json.loads(first)
		self.assertEqual(data['risk_level'], "high")
		self.assertEqual(list(data.keys()), sorted(data.keys()))

#============================================

if __name__ == '__main__':
	unittest.main()
