"""Per-file pipeline: parse, extract components, emit, write."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from sharpjs.component import extract_components
from sharpjs.config import CompilerConfig
from sharpjs.emitter import emit_module
from sharpjs.errors import Diagnostic
from sharpjs.parser import parse_compilation_unit
from sharpjs.registry import ExpressionRegistry, StatementRegistry
from sharpjs.strategies import default_expression_registry, default_statement_registry

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".cs"


@dataclass(slots=True)
class CompileResult:
	"""Outcome of compiling one source."""

	source: str
	code: str
	diagnostics: list[Diagnostic] = field(default_factory=list)
	output: Path | None = None
	written: bool = False

	@property
	def ok(self) -> bool:
		return not self.diagnostics


def compile_source(
	text: str,
	path: str | None = None,
	config: CompilerConfig | None = None,
	*,
	expression_registry: ExpressionRegistry | None = None,
	statement_registry: StatementRegistry | None = None,
) -> CompileResult:
	"""Compile C# source text to a JavaScript module.

	Raises:
		ParseError: The source is not valid C#.
	"""
	cfg = config or CompilerConfig()
	unit = parse_compilation_unit(text)
	module = extract_components(unit, path)
	if not module.components and not module.enums:
		logger.info("%s declares no components", path or "<source>")
	result = emit_module(
		module,
		cfg.runtime_module,
		expression_registry=expression_registry,
		statement_registry=statement_registry,
	)
	level = logging.WARNING if cfg.strict else logging.INFO
	for diagnostic in result.diagnostics:
		logger.log(level, diagnostic.format(path))
	return CompileResult(path or "<source>", result.code, result.diagnostics)


def write_file_if_changed(path: Path, content: str) -> bool:
	"""Write content to file only if it has changed. Returns whether it wrote."""
	if path.exists():
		try:
			if path.read_text() == content:
				return False
		except OSError:
			logger.warning(f"Can't read file {path.absolute()}")
	path.parent.mkdir(exist_ok=True, parents=True)
	path.write_text(content)
	return True


def compile_file(
	path: Path,
	config: CompilerConfig | None = None,
	*,
	expression_registry: ExpressionRegistry | None = None,
	statement_registry: StatementRegistry | None = None,
) -> CompileResult:
	"""Compile one `.cs` file and write its module under the output directory."""
	cfg = config or CompilerConfig()
	result = compile_source(
		path.read_text(),
		str(path),
		cfg,
		expression_registry=expression_registry,
		statement_registry=statement_registry,
	)
	result.output = cfg.output_path(path)
	result.written = write_file_if_changed(result.output, result.code)
	if result.written:
		logger.debug("Wrote %s", result.output)
	return result


def find_sources(paths: Iterable[Path]) -> list[Path]:
	"""Expand directories into the `.cs` files below them, sorted."""
	out: list[Path] = []
	for path in paths:
		if path.is_dir():
			out.extend(sorted(p for p in path.rglob(f"*{SOURCE_SUFFIX}") if p.is_file()))
		else:
			out.append(path)
	return out


def compile_files(paths: Iterable[Path], config: CompilerConfig | None = None) -> list[CompileResult]:
	"""Compile every source under `paths`, sharing one pair of registries."""
	cfg = config or CompilerConfig()
	expressions = default_expression_registry()
	statements = default_statement_registry()
	return [
		compile_file(p, cfg, expression_registry=expressions, statement_registry=statements)
		for p in find_sources(paths)
	]
