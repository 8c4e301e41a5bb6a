from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

DEFAULT_RUNTIME = "@sharpjs/runtime"

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class CompilerConfig:
	"""
	Configuration for compiling C# component sources to JavaScript modules.

	Attributes:
	    runtime_module (str): Module the emitted code imports its base classes from.
	    out_dir (Path | str): Directory receiving the emitted modules.
	    source_root (Path | None): Root the output layout mirrors.
	    strict (bool): Treat conversion diagnostics as failures.
	    extension (str): File extension of emitted modules.
	"""

	runtime_module: str = DEFAULT_RUNTIME
	"""Module the emitted code imports its base classes from."""

	out_dir: Path | str = "dist"
	"""Directory receiving the emitted modules."""

	source_root: Path | None = None
	"""Root the output layout mirrors. Without one, outputs are written flat."""

	strict: bool = False
	"""Treat conversion diagnostics as failures."""

	extension: str = ".js"
	"""File extension of emitted modules."""

	@classmethod
	def from_env(cls, **overrides: object) -> CompilerConfig:
		"""Defaults, then `SHARPJS_*` environment variables, then `overrides`.

		Overrides whose value is None are ignored, so CLI options that were
		not given keep the environment's value.
		"""
		config = cls()
		if runtime := os.environ.get("SHARPJS_RUNTIME"):
			config.runtime_module = runtime
		if out_dir := os.environ.get("SHARPJS_OUT_DIR"):
			config.out_dir = out_dir
		if source_root := os.environ.get("SHARPJS_SOURCE_ROOT"):
			config.source_root = Path(source_root)
		if strict := os.environ.get("SHARPJS_STRICT"):
			config.strict = strict.lower() in _TRUTHY
		if extension := os.environ.get("SHARPJS_EXTENSION"):
			config.extension = extension if extension.startswith(".") else f".{extension}"
		given = {k: v for k, v in overrides.items() if v is not None}
		return replace(config, **given)  # pyright: ignore[reportArgumentType]

	@property
	def out_path(self) -> Path:
		return Path(self.out_dir)

	def output_path(self, source: Path) -> Path:
		"""Where the module compiled from `source` is written."""
		relative = Path(source.name)
		if self.source_root is not None:
			try:
				relative = source.resolve().relative_to(Path(self.source_root).resolve())
			except ValueError:
				pass
		return self.out_path / relative.with_suffix(self.extension)
