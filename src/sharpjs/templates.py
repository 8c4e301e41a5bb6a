from mako.template import Template

# Whole module: header, runtime imports, enums, then one block per class
MODULE_TEMPLATE = Template(
	"""// Generated by sharpjs from ${source}. Do not edit.
% if imports:
import { ${", ".join(imports)} } from "${runtime}";
% endif
% for enum in enums:

${enum}
% endfor
% for cls in classes:

${cls}
% endfor
"""
)

ENUM_TEMPLATE = Template(
	"""export const ${name} = Object.freeze({
% for key, value in members:
  ${key}: ${value},
% endfor
});"""
)

# Members arrive indented one level and are separated by a blank line
CLASS_TEMPLATE = Template(
	"""${"export " if exported else ""}class ${name}${" extends " + base if base else ""} {
% for i, member in enumerate(members):
% if i:

% endif
${member}
% endfor
}"""
)

METHOD_TEMPLATE = Template(
	"""${signature} {
% if body:
${body}
% endif
}"""
)

# Runtime plumbing every state class carries
STATE_RUNTIME_TEMPLATE = Template(
	"""get component() {
  return this._component;
}

setState(fn) {
  fn();
  this._needsRender = true;
  this._component._scheduleRender();
}"""
)
