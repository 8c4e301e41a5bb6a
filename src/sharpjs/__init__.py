"""C# component logic to browser JavaScript."""

# Component model and emission
from sharpjs.compiler import CompileResult as CompileResult
from sharpjs.compiler import compile_file as compile_file
from sharpjs.compiler import compile_files as compile_files
from sharpjs.compiler import compile_source as compile_source
from sharpjs.component import ComponentDefinition as ComponentDefinition
from sharpjs.component import ModuleDefinition as ModuleDefinition
from sharpjs.component import extract_components as extract_components
from sharpjs.config import CompilerConfig as CompilerConfig

# Conversion
from sharpjs.context import ConversionContext as ConversionContext
from sharpjs.converter import ConversionResult as ConversionResult
from sharpjs.converter import Converter as Converter
from sharpjs.emitter import EmitResult as EmitResult
from sharpjs.emitter import emit_module as emit_module

# Errors
from sharpjs.errors import ConversionError as ConversionError
from sharpjs.errors import Diagnostic as Diagnostic
from sharpjs.errors import ParseError as ParseError
from sharpjs.errors import RegistryError as RegistryError
from sharpjs.errors import SharpJsError as SharpJsError

# Front end
from sharpjs.parser import parse_compilation_unit as parse_compilation_unit
from sharpjs.parser import parse_expression as parse_expression
from sharpjs.parser import parse_statement as parse_statement
from sharpjs.parser import parse_statements as parse_statements

# Strategies and registries
from sharpjs.registry import IDIOM as IDIOM
from sharpjs.registry import STRUCTURAL as STRUCTURAL
from sharpjs.registry import ExpressionRegistry as ExpressionRegistry
from sharpjs.registry import ExpressionStrategy as ExpressionStrategy
from sharpjs.registry import StatementRegistry as StatementRegistry
from sharpjs.registry import StatementStrategy as StatementStrategy

# Semantic model
from sharpjs.semantic import Binder as Binder
from sharpjs.semantic import SemanticHelper as SemanticHelper
from sharpjs.semantic import Symbol as Symbol
from sharpjs.semantic import SymbolTable as SymbolTable
from sharpjs.strategies import default_expression_registry as default_expression_registry
from sharpjs.strategies import default_statement_registry as default_statement_registry
