#!/usr/bin/env python3

import os
import lxml.etree
from passepartoutlib.core.overlay import GridPreviewOutput, OverlayOutput

#============================================

SVG_NAMESPACE = "http://www.w3.org/2000/svg"

FRAME_COLOR = "#FFFFFF"
SAFE_ZONE_COLOR = "#00E676"
THIRDS_COLOR = "#00B0FF"
CROP_COLOR = "#FF5252"
MIDLINE_COLOR = "#FFAB40"

#============================================

def _qualified(tag: str) -> str:
	return f"{{{SVG_NAMESPACE}}}{tag}"

#============================================

def _svg_root(width: int, height: int, ratio: str):
	root = lxml.etree.Element(_qualified('svg'), nsmap={None: SVG_NAMESPACE})
	root.set('viewBox', f"0 0 {width} {height}")
	root.set('width', str(width))
	root.set('height', str(height))
	root.set('data-ratio', str(ratio))
	return root

#============================================

def _element(parent, tag: str, attributes: dict):
	node = lxml.etree.SubElement(parent, _qualified(tag))
	for (name, value) in attributes.items():
		node.set(name, str(value))
	return node

#============================================

def _rect(parent, element_id: str, left: int, top: int, width: int, height: int,
	color: str, dash: str = None):
	attributes = {
		'id': element_id, 'x': left, 'y': top, 'width': width, 'height': height,
		'fill': "none", 'stroke': color, 'stroke-width': 4,
	}
	if dash is not None:
		attributes['stroke-dasharray'] = dash
	return _element(parent, 'rect', attributes)

#============================================

def _line(parent, element_id: str, x1: int, y1: int, x2: int, y2: int,
	color: str, dash: str):
	return _element(parent, 'line', {
		'id': element_id, 'x1': x1, 'y1': y1, 'x2': x2, 'y2': y2,
		'stroke': color, 'stroke-width': 2, 'stroke-dasharray': dash,
	})

#============================================

def build_overlay_svg(overlay: OverlayOutput):
	"""
	Build the safe-zone and thirds guide as an SVG element tree.

	Args:
		overlay: Result of overlay.create_overlay().

	Returns:
		lxml.etree._Element: Root svg element.
	"""
	width = overlay.canvas.width
	height = overlay.canvas.height
	root = _svg_root(width, height, overlay.ratio)
	_rect(root, "border", 0, 0, width, height, FRAME_COLOR)
	zone = overlay.safe_zone
	_rect(root, "safe-zone", zone.left, zone.top, zone.width, zone.height,
		SAFE_ZONE_COLOR, dash="16 16")
	for (index, x) in enumerate(overlay.thirds.vertical, start=1):
		_line(root, f"third-v-{index}", x, 0, x, height, THIRDS_COLOR, "8 12")
	for (index, y) in enumerate(overlay.thirds.horizontal, start=1):
		_line(root, f"third-h-{index}", 0, y, width, y, THIRDS_COLOR, "8 12")
	return root

#============================================

def build_grid_preview_svg(preview: GridPreviewOutput):
	width = preview.canvas.width
	height = preview.canvas.height
	root = _svg_root(width, height, preview.ratio)
	_rect(root, "post-frame", 0, 0, width, height, FRAME_COLOR)
	crop = preview.grid_crop_square
	_rect(root, "grid-crop-square", crop.left, crop.top, crop.size, crop.size,
		CROP_COLOR, dash="16 16")
	_line(root, "grid-crop-midline", 0, preview.midline_y, width, preview.midline_y,
		MIDLINE_COLOR, "8 10")
	return root

#============================================

def svg_text(root) -> str:
	return lxml.etree.tostring(root, pretty_print=True, encoding='unicode')

#============================================

def write_svg(root, output_file: str) -> str:
	output_path = os.path.abspath(output_file)
	os.makedirs(os.path.dirname(output_path), exist_ok=True)
	tree = lxml.etree.ElementTree(root)
	tree.write(output_path, encoding='utf-8', xml_declaration=True, pretty_print=True)
	return output_path
