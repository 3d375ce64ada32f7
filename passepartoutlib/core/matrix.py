#!/usr/bin/env python3

"""
validate-matrix batch harness.

Loads a list of export cases, applies id/limit selection, runs each case in
isolation and aggregates the results. A malformed case file or bad selection
is fatal (ConfigError); a case that fails at runtime becomes an error row.
"""

# Standard Library
import concurrent.futures
import os
import time
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType

# PIP3 modules
from tqdm import tqdm

# local repo modules
from passepartoutlib.core import utils
from passepartoutlib.core.contracts import CaseResult, ConfidenceLabel, ExportProfiles, Grade
from passepartoutlib.core.contracts import MatrixCase, MatrixOutput, MatrixSummary
from passepartoutlib.core.contracts import Mode, Ruleset, Surface, Workflow
from passepartoutlib.core.export_profiles import load_export_profiles
from passepartoutlib.core.pipeline import ExportRequest, run_benchmark
from passepartoutlib.core.utils import ConfigError

#============================================

REQUIRED_STRING_FIELDS = ('file', 'out')
OPTIONAL_STRING_FIELDS = {
	'canvas_profile': ('canvas_profile', 'canvasProfile'),
	'canvas_style': ('canvas_style', 'canvasStyle'),
}
WHITE_CANVAS_KEYS = ('white_canvas', 'whiteCanvas')

#============================================

def _first_present(row: dict, keys: tuple):
	for key in keys:
		if key in row:
			return row[key]
	return None

#============================================

def _resolve_path(base_dir: str, path: str) -> str:
	if os.path.isabs(path):
		return path
	return os.path.abspath(os.path.join(base_dir, path))

#============================================

def _parse_case(row, index: int, base_dir: str, ruleset: Ruleset = None) -> MatrixCase:
	if not isinstance(row, dict):
		raise ConfigError(f"invalid case at index {index}: must be a mapping",
			key_path=f"[{index}]")
	case_id = row.get('id')
	if not isinstance(case_id, str) or case_id.strip() == "":
		raise ConfigError(f"invalid case at index {index}: id must be non-empty string",
			key_path=f"[{index}].id")
	values = {}
	for field_name in REQUIRED_STRING_FIELDS:
		value = row.get(field_name)
		if not isinstance(value, str) or value.strip() == "":
			raise ConfigError(f"invalid case {case_id}: {field_name} must be non-empty string",
				key_path=f"{case_id}.{field_name}")
		values[field_name] = _resolve_path(base_dir, value)
	try:
		mode = Mode.parse(row.get('mode'), "mode")
		surface = Surface.parse(row.get('surface'), "surface")
		workflow = None
		if row.get('workflow') is not None:
			workflow = Workflow.parse(row.get('workflow'), "workflow")
	except ValueError as error:
		raise ConfigError(f"invalid case {case_id}: {error}", key_path=case_id) from None
	white_canvas = _first_present(row, WHITE_CANVAS_KEYS)
	if white_canvas is not None and not isinstance(white_canvas, bool):
		raise ConfigError(f"invalid case {case_id}: white_canvas must be boolean",
			key_path=f"{case_id}.white_canvas")
	for (field_name, keys) in OPTIONAL_STRING_FIELDS.items():
		value = _first_present(row, keys)
		if value is not None and (not isinstance(value, str) or value.strip() == ""):
			raise ConfigError(f"invalid case {case_id}: {field_name} must be non-empty string",
				key_path=f"{case_id}.{field_name}")
		values[field_name] = value
	if ruleset is not None:
		profile = values['canvas_profile']
		if profile is not None and profile not in ruleset.canvas_profiles:
			allowed = "|".join(sorted(ruleset.canvas_profiles))
			raise ConfigError(f"invalid case {case_id}: canvas_profile must be {allowed}",
				key_path=f"{case_id}.canvas_profile")
		style = values['canvas_style']
		if style is not None and style not in ruleset.styles:
			allowed = "|".join(sorted(ruleset.styles))
			raise ConfigError(f"invalid case {case_id}: canvas_style must be {allowed}",
				key_path=f"{case_id}.canvas_style")
	return MatrixCase(
		id=case_id,
		file=values['file'],
		out=values['out'],
		mode=mode,
		surface=surface,
		workflow=workflow,
		white_canvas=white_canvas,
		canvas_profile=values['canvas_profile'],
		canvas_style=values['canvas_style'],
	)

#============================================

def load_cases(cases_file: str, ruleset: Ruleset = None) -> list:
	"""
	Load and validate a case list.

	Args:
		cases_file: JSON or YAML file holding a list of case mappings.
		ruleset: When given, canvas profile and style names are checked too.

	Returns:
		list: MatrixCase records in file order.
	"""
	abs_cases_file = os.path.abspath(cases_file)
	base_dir = os.path.dirname(abs_cases_file)
	rows = utils.load_data_file(abs_cases_file, "matrix cases file")
	if not isinstance(rows, list):
		raise ConfigError(f"invalid matrix cases file: expected array at {abs_cases_file}")
	cases = []
	seen = set()
	# out path -> owning case id; parallel jobs must not share an output file
	out_owners = {}
	for index, row in enumerate(rows):
		case = _parse_case(row, index, base_dir, ruleset)
		if case.id in seen:
			raise ConfigError(f"invalid matrix cases file: duplicate case id {case.id}",
				key_path=case.id)
		owner = out_owners.get(case.out)
		if owner is not None:
			raise ConfigError(f"invalid matrix cases file: case {case.id} writes "
				f"{case.out}, already used by case {owner}", key_path=f"{case.id}.out")
		seen.add(case.id)
		out_owners[case.out] = case.id
		cases.append(case)
	return cases

#============================================

def read_only_ids_file(path: str) -> list:
	if not os.path.isfile(path):
		raise ConfigError(f"only-ids file not found: {path}")
	ids = []
	with open(path, 'r', encoding='utf-8') as handle:
		for line in handle:
			value = line.strip()
			if value == "" or value.startswith("#"):
				continue
			ids.append(value)
	return ids

#============================================

def select_cases(cases: list, only_ids: list = None, only_file: str = None,
	max_cases: int = None) -> list:
	"""
	Apply id and count selection to a case list.

	Args:
		cases: All cases in file order.
		only_ids: Explicit case ids.
		only_file: File of case ids; exclusive with only_ids.
		max_cases: Keep at most this many cases, in file order.

	Returns:
		list: Selected cases, in file order.
	"""
	if only_ids is not None and only_file is not None:
		raise ConfigError("use an explicit id list or an id file, not both")
	if only_file is not None:
		only_ids = read_only_ids_file(only_file)
	selected = list(cases)
	if only_ids is not None:
		known = {case.id for case in cases}
		unknown = [case_id for case_id in only_ids if case_id not in known]
		if len(unknown) > 0:
			raise ConfigError(f"unknown case ids: {', '.join(unknown)}")
		wanted = set(only_ids)
		selected = [case for case in cases if case.id in wanted]
	if max_cases is not None:
		if isinstance(max_cases, bool) or not isinstance(max_cases, int) or max_cases <= 0:
			raise ConfigError(f"max_cases must be a positive integer, got {max_cases!r}")
		selected = selected[:max_cases]
	return selected

#============================================

def default_runner(ruleset: Ruleset, profiles: ExportProfiles = None):
	if profiles is None:
		profiles = load_export_profiles()
	def run_case(case: MatrixCase):
		request = ExportRequest(
			file=case.file,
			mode=case.mode,
			surface=case.surface,
			workflow=case.workflow or Workflow.UNKNOWN,
			white_canvas=bool(case.white_canvas),
			canvas_profile=case.canvas_profile,
			canvas_style=case.canvas_style,
		)
		return run_benchmark(request, case.out, ruleset, profiles)
	return run_case

#============================================

def _elapsed_ms(start: float) -> int:
	return int(round((time.monotonic() - start) * 1000))

#============================================

def run_case_isolated(case: MatrixCase, runner) -> CaseResult:
	start = time.monotonic()
	try:
		result = runner(case)
	except Exception as error:
		message = str(error) or error.__class__.__name__
		return CaseResult(id=case.id, status="error", duration_ms=_elapsed_ms(start),
			error=message)
	return CaseResult(id=case.id, status="ok", duration_ms=_elapsed_ms(start),
		benchmark=result)

#============================================

def run_cases(cases: list, runner, jobs: int = 1) -> list:
	"""
	Run every case, converting failures into error rows.

	Args:
		cases: Selected cases.
		runner: Callable taking a MatrixCase and returning a BenchmarkOutput.
		jobs: Worker threads; each writes only its own result slot.

	Returns:
		list: CaseResult rows in case order.
	"""
	results = [None] * len(cases)
	if jobs is None or jobs <= 1 or len(cases) <= 1:
		iterator = enumerate(cases)
		if not utils.is_quiet_mode():
			iterator = tqdm(iterator, total=len(cases), desc="validate-matrix")
		for (index, case) in iterator:
			results[index] = run_case_isolated(case, runner)
		return results
	with concurrent.futures.ThreadPoolExecutor(max_workers=jobs) as pool:
		futures = {
			pool.submit(run_case_isolated, case, runner): index
			for (index, case) in enumerate(cases)
		}
		for future in concurrent.futures.as_completed(futures):
			results[futures[future]] = future.result()
	return results

#============================================

def _average(values: list):
	if len(values) == 0:
		return None
	total = sum(Decimal(str(value)) for value in values)
	mean = total / len(values)
	return float(mean.quantize(Decimal("0.001"), rounding=ROUND_HALF_UP))

#============================================

def summarize(results: list) -> MatrixSummary:
	benchmarks = [row.benchmark for row in results if row.ok and row.benchmark is not None]
	grade_counts = {grade.value: 0 for grade in Grade}
	confidence_counts = {label.value: 0 for label in ConfidenceLabel}
	for bench in benchmarks:
		grade_counts[bench.score.grade.value] += 1
		confidence_counts[bench.confidence.label.value] += 1
	return MatrixSummary(
		avg_total_score=_average([bench.score.total for bench in benchmarks]),
		avg_confidence=_average([bench.confidence.value for bench in benchmarks]),
		grade_counts=MappingProxyType(grade_counts),
		confidence_counts=MappingProxyType(confidence_counts),
	)

#============================================

def validate_matrix(cases_file: str, ruleset: Ruleset, only_ids: list = None,
	only_file: str = None, max_cases: int = None, runner=None,
	jobs: int = 1, profiles: ExportProfiles = None) -> MatrixOutput:
	"""
	Load, select, run and aggregate a matrix of export cases.

	Args:
		cases_file: Case list path.
		ruleset: Loaded ruleset.
		only_ids: Explicit case ids.
		only_file: File with case ids.
		max_cases: Cap on selected cases.
		runner: Per-case callable; defaults to the export+benchmark pipeline.
		jobs: Worker threads.
		profiles: Export profiles for the default runner.

	Returns:
		MatrixOutput: Counts, summary and per-case rows.
	"""
	all_cases = load_cases(cases_file, ruleset)
	return run_matrix(all_cases, ruleset, only_ids=only_ids, only_file=only_file,
		max_cases=max_cases, runner=runner, jobs=jobs, profiles=profiles)

#============================================

def run_matrix(all_cases: list, ruleset: Ruleset, only_ids: list = None,
	only_file: str = None, max_cases: int = None, runner=None,
	jobs: int = 1, profiles: ExportProfiles = None) -> MatrixOutput:
	start = time.monotonic()
	selected = select_cases(all_cases, only_ids=only_ids, only_file=only_file,
		max_cases=max_cases)
	if runner is None:
		runner = default_runner(ruleset, profiles)
	results = run_cases(selected, runner, jobs=jobs)
	succeeded = sum(1 for row in results if row.ok)
	return MatrixOutput(
		duration_ms=_elapsed_ms(start),
		cases_in_file=len(all_cases),
		cases_total=len(selected),
		cases_succeeded=succeeded,
		cases_failed=len(results) - succeeded,
		cases_skipped=len(all_cases) - len(selected),
		selected_case_ids=tuple(case.id for case in selected),
		summary=summarize(results),
		results=tuple(results),
	)
