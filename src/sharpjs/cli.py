"""
Command-line interface for sharpjs.
This module provides the commands for compiling C# component sources and
converting snippets.
"""
# typer relies on function calls used as default values
# pyright: reportCallInDefaultInitializer=false

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from sharpjs.compiler import CompileResult, compile_file, find_sources
from sharpjs.config import CompilerConfig
from sharpjs.converter import Converter
from sharpjs.errors import ParseError
from sharpjs.parser import parse_expression, parse_statements
from sharpjs.strategies import default_expression_registry, default_statement_registry

cli = typer.Typer(
	name="sharpjs",
	help="sharpjs - C# component logic to browser JavaScript",
	no_args_is_help=True,
)


@cli.command("build")
def build(
	sources: list[Path] = typer.Argument(
		..., help="`.cs` files or directories to compile (searched recursively)"
	),
	out: Path | None = typer.Option(None, "--out", "-o", help="Output directory"),
	runtime: str | None = typer.Option(
		None, "--runtime", help="Module the emitted code imports from"
	),
	source_root: Path | None = typer.Option(
		None, "--source-root", help="Root the output layout mirrors"
	),
	strict: bool = typer.Option(
		False, "--strict", help="Fail when any construct has no conversion rule"
	),
	verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
	"""Compile C# component sources to JavaScript modules."""
	console = Console()
	if verbose:
		logging.basicConfig(level=logging.DEBUG)
	config = CompilerConfig.from_env(
		out_dir=out, runtime_module=runtime, source_root=source_root, strict=strict or None
	)
	files = find_sources(sources)
	missing = [f for f in files if not f.is_file()]
	if missing:
		for f in missing:
			console.log(f"❌ File not found: {f}")
		raise typer.Exit(1)
	if not files:
		console.log("⚠️  No .cs files found")
		return

	console.log(f"🔄 Compiling {len(files)} file(s) to {config.out_path}")
	expressions = default_expression_registry()
	statements = default_statement_registry()
	results: list[CompileResult] = []
	failed = 0
	for f in files:
		try:
			results.append(
				compile_file(f, config, expression_registry=expressions, statement_registry=statements)
			)
		except ParseError as exc:
			console.print(f"❌ {f}: {exc}", style="red", markup=False)
			failed += 1

	diagnostics = 0
	for result in results:
		for diagnostic in result.diagnostics:
			console.print(diagnostic.format(result.source), style="yellow", markup=False)
		diagnostics += len(result.diagnostics)
		if result.written:
			console.log(f"📝 {result.source} -> {result.output}")
	unchanged = sum(1 for r in results if not r.written)
	console.log(
		f"✅ Compiled {len(results)} file(s), {unchanged} unchanged, {diagnostics} diagnostic(s)"
	)
	if failed or (config.strict and diagnostics):
		raise typer.Exit(1)


@cli.command("convert")
def convert(
	snippet: str = typer.Argument(..., help="C# expression or statement(s)"),
):
	"""Print the JavaScript conversion of a C# snippet."""
	console = Console()
	converter = Converter()
	try:
		result = converter.convert_value(parse_expression(snippet))
	except ParseError:
		try:
			statements = parse_statements(snippet)
		except ParseError as exc:
			console.print(f"❌ {exc}", style="red", markup=False)
			raise typer.Exit(1) from None
		result = converter.convert_body(statements)
	typer.echo(result.code)
	for diagnostic in result.diagnostics:
		console.print(diagnostic.format(), style="yellow", markup=False)


def main():
	"""Main CLI entry point."""
	try:
		cli()
	except Exception:
		console = Console()
		console.print_exception()
		raise typer.Exit(1) from None


if __name__ == "__main__":
	main()
