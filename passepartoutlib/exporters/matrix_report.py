#!/usr/bin/env python3

"""
JSON, Markdown and CSV capture-template artifacts for validate-matrix runs.
"""

# Standard Library
import csv
import io
import os

# local repo modules
from passepartoutlib.core import utils
from passepartoutlib.core.contracts import MatrixCase, MatrixOutput

#============================================

JSON_REPORT_NAME = "validate_matrix.json"
MARKDOWN_REPORT_NAME = "validate_matrix.md"
CAPTURE_TEMPLATE_NAME = "validate_matrix_capture.csv"

CAPTURE_TEMPLATE_HEADER = (
	"case_id",
	"status",
	"surface",
	"mode",
	"target_resolution",
	"output_resolution",
	"score_total",
	"grade",
	"confidence_label",
	"uploaded_at",
	"observed_resolution",
	"visual_check",
	"notes",
)

#============================================

def to_stable_json(output: MatrixOutput, indent: int = None) -> str:
	return utils.stable_json(output.to_dict(), indent=indent)

#============================================

def _escape_cell(value) -> str:
	if value is None:
		return "-"
	return str(value).replace("|", "\\|").replace("\n", " ")

#============================================

def _format_counts(counts) -> str:
	return ", ".join(f"{key}={counts[key]}" for key in sorted(counts))

#============================================

def build_markdown_report(output: MatrixOutput) -> str:
	"""
	Build a human readable Markdown report.

	Args:
		output: validate-matrix result.

	Returns:
		str: Markdown text.
	"""
	summary = output.summary
	lines = []
	lines.append("# validate-matrix report")
	lines.append("")
	lines.append(f"- matrix version: {output.matrix_version}")
	lines.append(f"- cases in file: {output.cases_in_file}")
	lines.append(f"- cases selected: {output.cases_total}")
	lines.append(f"- succeeded: {output.cases_succeeded}")
	lines.append(f"- failed: {output.cases_failed}")
	lines.append(f"- skipped: {output.cases_skipped}")
	lines.append(f"- average score: {_escape_cell(summary.avg_total_score)}")
	lines.append(f"- average confidence: {_escape_cell(summary.avg_confidence)}")
	lines.append(f"- grades: {_format_counts(summary.grade_counts)}")
	lines.append(f"- confidence: {_format_counts(summary.confidence_counts)}")
	lines.append("")
	lines.append("## Cases")
	lines.append("")
	lines.append("| case | status | target | output | score | grade | confidence | detail |")
	lines.append("| --- | --- | --- | --- | --- | --- | --- | --- |")
	for row in output.results:
		if row.ok and row.benchmark is not None:
			bench = row.benchmark
			comparison = bench.comparison
			detail = "; ".join(comparison.notes) if comparison.notes else "ok"
			cells = [row.id, row.status, comparison.target_resolution,
				comparison.output_resolution, bench.score.total, bench.score.grade.value,
				f"{bench.confidence.value} ({bench.confidence.label.value})", detail]
		else:
			cells = [row.id, row.status, None, None, None, None, None, row.error]
		lines.append("| " + " | ".join(_escape_cell(cell) for cell in cells) + " |")
	lines.append("")
	return "\n".join(lines)

#============================================

def build_capture_template_csv(output: MatrixOutput, cases: list = None) -> str:
	"""
	Build the manual verification CSV with a fixed header.

	The upload columns are left blank for the person checking the platform.

	Args:
		output: validate-matrix result.
		cases: Optional selected MatrixCase records for surface/mode columns.

	Returns:
		str: CSV text.
	"""
	case_map = {}
	for case in cases or []:
		if isinstance(case, MatrixCase):
			case_map[case.id] = case
	buffer = io.StringIO()
	writer = csv.writer(buffer, lineterminator="\n")
	writer.writerow(CAPTURE_TEMPLATE_HEADER)
	for row in output.results:
		case = case_map.get(row.id)
		surface = case.surface.value if case is not None else ""
		mode = case.mode.value if case is not None else ""
		target = ""
		produced = ""
		total = ""
		grade = ""
		label = ""
		if row.ok and row.benchmark is not None:
			target = row.benchmark.comparison.target_resolution
			produced = row.benchmark.comparison.output_resolution
			total = row.benchmark.score.total
			grade = row.benchmark.score.grade.value
			label = row.benchmark.confidence.label.value
		writer.writerow([row.id, row.status, surface, mode, target, produced,
			total, grade, label, "", "", "", ""])
	return buffer.getvalue()

#============================================

def write_matrix_reports(output: MatrixOutput, report_dir: str,
	cases: list = None) -> dict:
	"""
	Write the JSON, Markdown and CSV artifacts.

	Returns:
		dict: Artifact kind to written path.
	"""
	paths = {
		'json': os.path.join(report_dir, JSON_REPORT_NAME),
		'markdown': os.path.join(report_dir, MARKDOWN_REPORT_NAME),
		'capture_csv': os.path.join(report_dir, CAPTURE_TEMPLATE_NAME),
	}
	utils.write_text_file(paths['json'], to_stable_json(output, indent=2) + "\n")
	utils.write_text_file(paths['markdown'], build_markdown_report(output))
	utils.write_text_file(paths['capture_csv'], build_capture_template_csv(output, cases))
	for path in paths.values():
		utils.log(f"wrote {path}")
	return paths
