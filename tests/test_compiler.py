"""
Tests for the per-file compile pipeline.
"""

import logging

import pytest
from sharpjs.compiler import compile_file, compile_files, compile_source, find_sources
from sharpjs.config import CompilerConfig
from sharpjs.errors import ParseError


class TestCompileSource:
	"""Parse, extract, emit."""

	def test_module_text(self, counter_source):
		result = compile_source(counter_source, "Counter.cs")
		assert result.ok
		assert result.source == "Counter.cs"
		assert result.code.startswith("// Generated by sharpjs from Counter.cs. Do not edit.\n")
		assert result.output is None

	def test_runtime_from_config(self, counter_source):
		config = CompilerConfig(runtime_module="./rt.js")
		result = compile_source(counter_source, "Counter.cs", config)
		assert 'from "./rt.js";' in result.code

	def test_parse_error(self):
		with pytest.raises(ParseError):
			compile_source("class A {", "A.cs")

	def test_diagnostics_are_logged(self, caplog):
		source = "class Odd : StatelessComponent { IComponent Build(BuildContext c) { goto x; } }"
		with caplog.at_level(logging.INFO, logger="sharpjs.compiler"):
			result = compile_source(source, "Odd.cs")
		assert not result.ok
		assert "Odd.cs:" in caplog.text
		assert "unsupported.statement" in caplog.text

	def test_strict_logs_warnings(self, caplog):
		source = "class Odd : StatelessComponent { IComponent Build(BuildContext c) { goto x; } }"
		with caplog.at_level(logging.WARNING, logger="sharpjs.compiler"):
			compile_source(source, "Odd.cs", CompilerConfig(strict=True))
		assert [r.levelno for r in caplog.records] == [logging.WARNING]


class TestCompileFile:
	"""Writing outputs."""

	def test_writes_once(self, tmp_path, counter_source):
		source = tmp_path / "src" / "Counter.cs"
		source.parent.mkdir()
		source.write_text(counter_source)
		config = CompilerConfig(out_dir=tmp_path / "out")

		first = compile_file(source, config)
		assert first.written
		assert first.output == tmp_path / "out" / "Counter.js"
		assert first.output.read_text() == first.code

		second = compile_file(source, config)
		assert not second.written

	def test_find_sources(self, tmp_path):
		(tmp_path / "b").mkdir()
		(tmp_path / "b" / "Two.cs").write_text("")
		(tmp_path / "One.cs").write_text("")
		(tmp_path / "notes.txt").write_text("")
		explicit = tmp_path / "Explicit.cs"
		assert find_sources([tmp_path, explicit]) == [
			tmp_path / "One.cs",
			tmp_path / "b" / "Two.cs",
			explicit,
		]

	def test_compile_files(self, tmp_path, counter_source):
		src = tmp_path / "src"
		(src / "pages").mkdir(parents=True)
		(src / "pages" / "Counter.cs").write_text(counter_source)
		(src / "Empty.cs").write_text("namespace App;")
		config = CompilerConfig(out_dir=tmp_path / "out", source_root=src)
		results = compile_files([src], config)
		assert [r.output for r in results] == [
			tmp_path / "out" / "Empty.js",
			tmp_path / "out" / "pages" / "Counter.js",
		]
		assert all(r.written for r in results)
