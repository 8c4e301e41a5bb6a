from pathlib import Path

from sharpjs.config import DEFAULT_RUNTIME, CompilerConfig


class TestFromEnv:
	"""Defaults, then environment variables, then explicit overrides."""

	def test_defaults(self, monkeypatch):
		for name in ("RUNTIME", "OUT_DIR", "SOURCE_ROOT", "STRICT", "EXTENSION"):
			monkeypatch.delenv(f"SHARPJS_{name}", raising=False)
		config = CompilerConfig.from_env()
		assert config.runtime_module == DEFAULT_RUNTIME
		assert config.out_path == Path("dist")
		assert config.source_root is None
		assert not config.strict
		assert config.extension == ".js"

	def test_environment(self, monkeypatch):
		monkeypatch.setenv("SHARPJS_RUNTIME", "./rt.js")
		monkeypatch.setenv("SHARPJS_OUT_DIR", "build")
		monkeypatch.setenv("SHARPJS_STRICT", "yes")
		monkeypatch.setenv("SHARPJS_EXTENSION", "mjs")
		config = CompilerConfig.from_env()
		assert config.runtime_module == "./rt.js"
		assert config.out_path == Path("build")
		assert config.strict
		assert config.extension == ".mjs"

	def test_overrides_win(self, monkeypatch):
		monkeypatch.delenv("SHARPJS_RUNTIME", raising=False)
		monkeypatch.setenv("SHARPJS_OUT_DIR", "build")
		config = CompilerConfig.from_env(out_dir=Path("other"), runtime_module=None)
		assert config.out_path == Path("other")
		assert config.runtime_module == DEFAULT_RUNTIME


class TestOutputPath:
	"""Output layout."""

	def test_flat_without_source_root(self, tmp_path):
		config = CompilerConfig(out_dir=tmp_path / "out")
		assert config.output_path(Path("src/pages/Home.cs")) == tmp_path / "out" / "Home.js"

	def test_mirrors_source_root(self, tmp_path):
		root = tmp_path / "src"
		config = CompilerConfig(out_dir=tmp_path / "out", source_root=root)
		source = root / "pages" / "Home.cs"
		assert config.output_path(source) == tmp_path / "out" / "pages" / "Home.js"

	def test_outside_source_root_is_flat(self, tmp_path):
		config = CompilerConfig(out_dir=tmp_path / "out", source_root=tmp_path / "src")
		assert config.output_path(tmp_path / "elsewhere" / "A.cs") == tmp_path / "out" / "A.js"
