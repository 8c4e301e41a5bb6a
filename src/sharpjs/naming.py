"""Identifier casing helpers."""

from __future__ import annotations


def to_camel_case(name: str) -> str:
	"""PascalCase member name to JavaScript camelCase.

	Leading acronyms collapse as a unit (`HTMLParser` -> `htmlParser`,
	`ID` -> `id`). Names that already start lowercase or with an underscore
	are returned unchanged, so the conversion is idempotent.
	"""
	if not name or not name[0].isupper():
		return name
	run = 0
	while run < len(name) and name[run].isupper():
		run += 1
	if run == len(name):
		return name.lower()
	if run == 1:
		return name[0].lower() + name[1:]
	# The last capital of the run starts the next word, unless a digit follows
	if name[run].isdigit():
		return name[:run].lower() + name[run:]
	return name[: run - 1].lower() + name[run - 1 :]


def split_generic(type_text: str) -> tuple[str, list[str]]:
	"""Split `Dictionary<string, List<int>>` into its name and argument texts."""
	text = type_text.strip()
	if text.endswith("?"):
		text = text[:-1]
	lt = text.find("<")
	if lt < 0 or not text.endswith(">"):
		return text, []
	name = text[:lt]
	args: list[str] = []
	depth = 0
	start = lt + 1
	for i in range(lt + 1, len(text) - 1):
		c = text[i]
		if c in "<(":
			depth += 1
		elif c in ">)":
			depth -= 1
		elif c == "," and depth == 0:
			args.append(text[start:i].strip())
			start = i + 1
	args.append(text[start : len(text) - 1].strip())
	return name, args


def simple_type_name(type_text: str) -> str:
	"""`System.Collections.Generic.List<int>?` -> `List`."""
	name, _ = split_generic(type_text)
	name = name.rstrip("?")
	while name.endswith("[]"):
		name = name[:-2]
	return name.rsplit(".", 1)[-1]
