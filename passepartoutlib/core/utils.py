#!/usr/bin/env python3

import json
import os
import shlex
import shutil
import subprocess
import sys
from fractions import Fraction
import yaml

#============================================

_QUIET_MODE = False

#============================================

class ConfigError(RuntimeError):
	"""
	Fatal configuration problem (ruleset, case list, selection options).

	Args:
		message: Human readable message.
		key_path: Dotted path of the offending key, when known.
	"""
	def __init__(self, message: str, key_path: str = None):
		super().__init__(message)
		self.key_path = key_path

#============================================

def set_quiet_mode(quiet: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(quiet)

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def log(message: str) -> None:
	if _QUIET_MODE:
		return
	print(message)

#============================================

def warn(message: str) -> None:
	print(message, file=sys.stderr)

#============================================

def check_dependency(cmd_name: str) -> None:
	"""
	Ensure a required external command exists.

	Args:
		cmd_name: Command to locate.
	"""
	if shutil.which(cmd_name) is None:
		raise RuntimeError(f"missing dependency: {cmd_name}")
	return

#============================================

def run_process(cmd: list, capture_output: bool = True) -> subprocess.CompletedProcess:
	"""
	Run a subprocess command without a shell.

	Args:
		cmd: Command list.
		capture_output: Capture stdout/stderr as text.

	Returns:
		subprocess.CompletedProcess: Finished process.
	"""
	log(f"CMD: '{shlex.join(cmd)}'")
	proc = subprocess.run(cmd, capture_output=capture_output, text=True)
	return proc

#============================================

def ensure_file_exists(filepath: str) -> None:
	if not os.path.isfile(filepath):
		raise RuntimeError(f"file not found: {filepath}")
	return

#============================================

def round_half_up_fraction(value: Fraction) -> int:
	numerator = value.numerator
	denominator = value.denominator
	whole = numerator // denominator
	remainder = numerator - (whole * denominator)
	if remainder * 2 >= denominator:
		return whole + 1
	return whole

#============================================

def round_half_up(value) -> int:
	"""
	Round a number to the nearest int, half up, using its decimal text.

	0.05 * 1080 is evaluated as exactly 54 rather than 54.000000000000007.
	"""
	if isinstance(value, Fraction):
		return round_half_up_fraction(value)
	return round_half_up_fraction(Fraction(str(value)))

#============================================

def scaled_round(ratio, size: int) -> int:
	return round_half_up_fraction(Fraction(str(ratio)) * size)

#============================================

def clamp(value, low, high):
	return min(high, max(low, value))

#============================================

def stable_json(data, indent: int = None) -> str:
	"""
	Serialize a mapping with sorted keys so equal content gives equal bytes.

	Args:
		data: JSON-safe mapping or list.
		indent: Optional indent; compact separators when None.

	Returns:
		str: JSON text.
	"""
	if indent is None:
		return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=True)
	return json.dumps(data, sort_keys=True, indent=indent, ensure_ascii=True)

#============================================

def load_data_file(path: str, label: str):
	"""
	Read a JSON or YAML data file.

	Files ending in .json go through the json module so that any valid
	JSON (tab indentation included) is accepted; everything else is YAML.

	Args:
		path: File to read.
		label: Name used in error messages, e.g. "ruleset".

	Returns:
		Parsed document.
	"""
	if not os.path.isfile(path):
		raise ConfigError(f"{label} file not found: {path}")
	with open(path, 'r', encoding='utf-8') as handle:
		if path.lower().endswith('.json'):
			try:
				return json.load(handle)
			except json.JSONDecodeError as error:
				raise ConfigError(f"invalid {label} {path}: {error}") from error
		try:
			return yaml.safe_load(handle)
		except yaml.YAMLError as error:
			raise ConfigError(f"invalid {label} {path}: {error}") from error

#============================================

def write_text_file(path: str, text: str) -> None:
	os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
	with open(path, "w", encoding="utf-8") as handle:
		handle.write(text)
	return
