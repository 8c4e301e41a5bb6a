"""
Tests for the command-line interface.
"""

from typer.testing import CliRunner

from sharpjs.cli import cli

runner = CliRunner()


class TestConvert:
	"""`sharpjs convert` prints the conversion of a snippet."""

	def test_expression(self):
		result = runner.invoke(cli, ["convert", "items.Where(x => x.Done).ToList()"])
		assert result.exit_code == 0
		assert result.stdout.splitlines()[0] == "items.filter((x) => x.done)"

	def test_statements(self):
		result = runner.invoke(cli, ["convert", "var x = 1; x++;"])
		assert result.exit_code == 0
		assert result.stdout.startswith("let x = 1;\nx++;\n")

	def test_fallback_reports_diagnostic(self):
		result = runner.invoke(cli, ["convert", "goto done;"])
		assert result.exit_code == 0
		assert "goto done;" in result.stdout
		assert "unsupported.statement" in result.stdout

	def test_parse_error(self):
		result = runner.invoke(cli, ["convert", "var = ;"])
		assert result.exit_code == 1


class TestBuild:
	"""`sharpjs build` compiles files into the output directory."""

	def test_build(self, tmp_path, counter_source):
		src = tmp_path / "src"
		src.mkdir()
		(src / "Counter.cs").write_text(counter_source)
		out = tmp_path / "out"

		result = runner.invoke(cli, ["build", str(src), "--out", str(out)])
		assert result.exit_code == 0, result.stdout
		output = out / "Counter.js"
		assert output.read_text().startswith("// Generated by sharpjs")
		written_at = output.stat().st_mtime_ns

		again = runner.invoke(cli, ["build", str(src), "--out", str(out)])
		assert again.exit_code == 0
		assert output.stat().st_mtime_ns == written_at

	def test_missing_file(self, tmp_path):
		result = runner.invoke(cli, ["build", str(tmp_path / "Nope.cs"), "--out", str(tmp_path)])
		assert result.exit_code == 1

	def test_parse_error_fails(self, tmp_path):
		(tmp_path / "Bad.cs").write_text("class Bad {")
		result = runner.invoke(cli, ["build", str(tmp_path), "--out", str(tmp_path / "out")])
		assert result.exit_code == 1

	def test_strict_fails_on_diagnostics(self, tmp_path):
		(tmp_path / "Odd.cs").write_text(
			"class Odd : StatelessComponent { IComponent Build(BuildContext c) { goto x; } }"
		)
		out = tmp_path / "out"
		lenient = runner.invoke(cli, ["build", str(tmp_path), "--out", str(out)])
		assert lenient.exit_code == 0
		strict = runner.invoke(cli, ["build", str(tmp_path), "--out", str(out), "--strict"])
		assert strict.exit_code == 1
