#!/usr/bin/env python3
"""
phlint - libphutil call-shape lint rules for PHP

High-level goals:
- Parse PHP (via tree-sitter) into a small immutable syntax tree
- Classify call sites: callee name, argument list, constant-string arguments
- Run four table-driven rules over the tree (PHLXHP1-4)
- Emit structured JSON findings for CI / IDEs

Rules:
  PHLXHP1  pht() called with a non-literal first argument
  PHLXHP2  array_combine(x, x), which fails on empty arrays before PHP 5.4
  PHLXHP3  call to a deprecated function
  PHLXHP4  dynamic string passed where a format/command/markup literal is required
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union
import argparse
import json
import sys

import tree_sitter_php as tsphp
import yaml
from tree_sitter import Language, Node, Parser

__version__ = "0.1.0"

PHP_LANGUAGE = Language(tsphp.language_php())


class ConfigurationError(Exception):
    """Raised when the linter is wired up or configured incorrectly."""


# ============================================================
# ===================== SYNTAX TREE ==========================
# ============================================================

class NodeKind(Enum):
    CALL = "call"
    NEW = "new"
    ARGUMENT_LIST = "argument_list"
    STRING_LITERAL = "string_literal"
    OTHER = "other"


@dataclass(frozen=True)
class SourceRange:
    """
    1-based lines and columns. Columns count UTF-8 bytes from the start of
    the line (as tree-sitter reports them), not characters.
    """
    file: str
    line_start: int
    col_start: int
    line_end: int
    col_end: int


@dataclass(frozen=True, eq=False)
class SyntaxNode:
    """
    One node of a parsed source unit. Trees are built by a TreeProvider and
    never modified afterwards; rules only hold references into them.

    Shape contract for CALL / NEW nodes:
    - children[0] is the callee (function name or class name)
    - children[1], when present, is the ARGUMENT_LIST
    ARGUMENT_LIST children are the argument value expressions, in order.
    """
    kind: NodeKind
    source_text: str
    children: Tuple["SyntaxNode", ...] = ()
    constant_string: bool = False
    type_name: str = ""  # raw grammar node type, e.g. "function_call_expression"
    source_range: Optional[SourceRange] = None

    def child_at(self, index: int) -> Optional["SyntaxNode"]:
        if 0 <= index < len(self.children):
            return self.children[index]
        return None


def select_descendants_of_kind(root: SyntaxNode, kind: NodeKind) -> List[SyntaxNode]:
    """
    Collect every descendant of `root` (not `root` itself) with the given kind,
    in depth-first pre-order, i.e. in source order.
    """
    matches: List[SyntaxNode] = []
    stack: List[SyntaxNode] = list(reversed(root.children))
    while stack:
        node = stack.pop()
        if node.kind is kind:
            matches.append(node)
        stack.extend(reversed(node.children))
    return matches


# ============================================================
# ================== CALL-SHAPE CLASSIFIER ===================
# ============================================================

def is_call_like(node: SyntaxNode) -> bool:
    return node.kind in (NodeKind.CALL, NodeKind.NEW)


def callee_name(node: SyntaxNode) -> Optional[str]:
    """Verbatim callee text of a call/constructor node (case preserved)."""
    if not is_call_like(node):
        return None
    callee = node.child_at(0)
    if callee is None:
        return None
    return callee.source_text


def call_arguments(node: SyntaxNode) -> Optional[Tuple[SyntaxNode, ...]]:
    """
    Argument expressions of a call/constructor node, or None when the node
    has no argument list at all (e.g. `new Foo;`).
    """
    if not is_call_like(node):
        return None
    arguments = node.child_at(1)
    if arguments is None or arguments.kind is not NodeKind.ARGUMENT_LIST:
        return None
    return arguments.children


def positional_argument(node: SyntaxNode, index: int) -> Optional[SyntaxNode]:
    arguments = call_arguments(node)
    if arguments is None or index < 0 or index >= len(arguments):
        return None
    return arguments[index]


def is_constant_string(node: SyntaxNode) -> bool:
    return node.constant_string


# ============================================================
# ===================== RULE REGISTRY ========================
# ============================================================

LINTER_NAME = "PHLXHP"
CACHE_VERSION = 2

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_AUTOFIX = "autofix"
SEVERITY_ADVICE = "advice"
SEVERITY_DISABLED = "disabled"

SEVERITIES = (
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    SEVERITY_AUTOFIX,
    SEVERITY_ADVICE,
    SEVERITY_DISABLED,
)


class RuleCode(IntEnum):
    PHT_WITH_DYNAMIC_STRING = 1
    ARRAY_COMBINE = 2
    DEPRECATED_FUNCTION = 3
    UNSAFE_DYNAMIC_STRING = 4


LINT_NAME_MAP: Mapping[RuleCode, str] = MappingProxyType({
    RuleCode.PHT_WITH_DYNAMIC_STRING: "Use of pht() on Dynamic String",
    RuleCode.ARRAY_COMBINE: "array_combine() Unreliable",
    RuleCode.DEPRECATED_FUNCTION: "Use of Deprecated Function",
    RuleCode.UNSAFE_DYNAMIC_STRING: "Unsafe Usage of Dynamic String",
})

# No entry for PHT_WITH_DYNAMIC_STRING: it takes the caller's default.
LINT_SEVERITY_MAP: Mapping[RuleCode, str] = MappingProxyType({
    RuleCode.ARRAY_COMBINE: SEVERITY_WARNING,
    RuleCode.DEPRECATED_FUNCTION: SEVERITY_WARNING,
    RuleCode.UNSAFE_DYNAMIC_STRING: SEVERITY_WARNING,
})


@dataclass(frozen=True)
class Finding:
    location: SyntaxNode
    code: RuleCode
    message: str

    @property
    def full_code(self) -> str:
        return f"{LINTER_NAME}{int(self.code)}"

    @property
    def name(self) -> str:
        return LINT_NAME_MAP[self.code]


# ============================================================
# ======================== RULES =============================
# ============================================================

PHT_FUNCTION = "pht"
PHT_MESSAGE = (
    "The first parameter of pht() can be only a scalar string, "
    "otherwise it can't be extracted."
)

ARRAY_COMBINE_FUNCTION = "array_combine"
ARRAY_COMBINE_MESSAGE = (
    "Prior to PHP 5.4, array_combine() fails when given empty "
    "arrays. Prefer to write array_combine(x, x) as array_fuse(x)."
)

# callee name (lowercase) -> zero-based index of the argument that must be a literal
DEFAULT_UNSAFE_FUNCTIONS: Mapping[str, int] = MappingProxyType({
    "hsprintf": 0,

    "csprintf": 0,
    "vcsprintf": 0,
    "execx": 0,
    "exec_manual": 0,
    "phutil_passthru": 0,

    "qsprintf": 1,
    "vqsprintf": 1,
    "queryfx": 1,
    "vqueryfx": 1,
    "queryfx_all": 1,
    "vqueryfx_all": 1,
    "queryfx_one": 1,
})

DEFAULT_UNSAFE_CONSTRUCTORS: Mapping[str, int] = MappingProxyType({
    "execfuture": 0,
})

DEFAULT_DEPRECATED_FUNCTIONS: Mapping[str, str] = MappingProxyType({
    # Placeholder name exercised by tests.
    "deprecated_function": "This function is most likely deprecated.",

    "phutil_render_tag": (
        "The phutil_render_tag() function is deprecated and unsafe. "
        "Use phutil_tag() instead."
    ),
    "javelin_render_tag": (
        "The javelin_render_tag() function is deprecated and unsafe. "
        "Use javelin_tag() instead."
    ),
    "phabricator_render_form": (
        "The phabricator_render_form() function is deprecated and unsafe. "
        "Use phabricator_form() instead."
    ),
    "phutil_escape_html": (
        "The phutil_escape_html() function is deprecated. Raw strings passed "
        "to phutil_tag() or hsprintf() are escaped automatically."
    ),
})


def _calls_named(root: SyntaxNode, name: str) -> List[SyntaxNode]:
    wanted = name.lower()
    return [
        call
        for call in select_descendants_of_kind(root, NodeKind.CALL)
        if (callee_name(call) or "").lower() == wanted
    ]


def lint_pht(root: SyntaxNode) -> List[Finding]:
    findings: List[Finding] = []
    for call in _calls_named(root, PHT_FUNCTION):
        first = positional_argument(call, 0)
        if first is None or is_constant_string(first):
            continue
        findings.append(Finding(call, RuleCode.PHT_WITH_DYNAMIC_STRING, PHT_MESSAGE))
    return findings


def lint_unsafe_dynamic_string(
    root: SyntaxNode,
    functions: Mapping[str, int] = DEFAULT_UNSAFE_FUNCTIONS,
    constructors: Mapping[str, int] = DEFAULT_UNSAFE_CONSTRUCTORS,
) -> List[Finding]:
    """
    Flag calls whose format/command/markup argument is not a literal.
    Function calls are reported before `new` expressions.
    """
    findings = _lint_unsafe_dynamic_string_calls(
        select_descendants_of_kind(root, NodeKind.CALL), functions
    )
    findings.extend(
        _lint_unsafe_dynamic_string_calls(
            select_descendants_of_kind(root, NodeKind.NEW), constructors
        )
    )
    return findings


def _lint_unsafe_dynamic_string_calls(
    calls: Iterable[SyntaxNode],
    safe: Mapping[str, int],
) -> List[Finding]:
    findings: List[Finding] = []
    for call in calls:
        name = callee_name(call)
        if name is None:
            continue
        param = safe.get(name.lower())
        if param is None:
            continue

        # Too few arguments is someone else's problem.
        identifier = positional_argument(call, param)
        if identifier is None or is_constant_string(identifier):
            continue

        findings.append(
            Finding(
                call,
                RuleCode.UNSAFE_DYNAMIC_STRING,
                f"Parameter {param + 1} of {name}() should be a scalar string, "
                "otherwise it's not safe.",
            )
        )
    return findings


def lint_array_combine(root: SyntaxNode) -> List[Finding]:
    """
    Flag array_combine(x, x). Arguments are compared by their verbatim source
    text, so equivalent but differently written expressions are not caught.
    """
    findings: List[Finding] = []
    for call in _calls_named(root, ARRAY_COMBINE_FUNCTION):
        arguments = call_arguments(call)
        if arguments is None or len(arguments) != 2:
            # Arity mismatches belong to a different check.
            continue
        first, second = arguments
        if first.source_text == second.source_text:
            findings.append(Finding(call, RuleCode.ARRAY_COMBINE, ARRAY_COMBINE_MESSAGE))
    return findings


def lint_deprecated_functions(
    root: SyntaxNode,
    deprecated: Mapping[str, str] = DEFAULT_DEPRECATED_FUNCTIONS,
) -> List[Finding]:
    findings: List[Finding] = []
    for call in select_descendants_of_kind(root, NodeKind.CALL):
        name = callee_name(call)
        if name is None:
            continue
        message = deprecated.get(name.lower())
        if not message:
            continue
        findings.append(Finding(call, RuleCode.DEPRECATED_FUNCTION, message))
    return findings


# ============================================================
# ==================== CONFIGURATION =========================
# ============================================================

@dataclass
class LintConfig:
    """
    Host-side knobs. The rule tables extend (or, with an empty message,
    switch off entries of) the built-in tables.
    """
    default_severity: str = SEVERITY_ERROR
    severity_overrides: Dict[RuleCode, str] = field(default_factory=dict)
    deprecated_functions: Mapping[str, str] = field(
        default_factory=lambda: DEFAULT_DEPRECATED_FUNCTIONS
    )
    unsafe_functions: Mapping[str, int] = field(
        default_factory=lambda: DEFAULT_UNSAFE_FUNCTIONS
    )
    unsafe_constructors: Mapping[str, int] = field(
        default_factory=lambda: DEFAULT_UNSAFE_CONSTRUCTORS
    )


def load_config_from_yaml(yaml_paths: Sequence[str]) -> LintConfig:
    """
    Build a LintConfig from zero or more YAML files. Every document in every
    file is applied in order, so later files override earlier ones.

    Missing or unreadable files are reported and skipped; malformed values
    raise ConfigurationError.
    """
    config = LintConfig()
    for path in yaml_paths:
        try:
            with open(path, "r", encoding="utf-8") as handle:
                documents = list(yaml.safe_load_all(handle))
        except FileNotFoundError:
            sys.stderr.write(f"[phlint] Config file not found: {path}\n")
            continue
        except OSError as exc:
            sys.stderr.write(f"[phlint] Could not read config file {path}: {exc}\n")
            continue
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

        for doc_index, doc in enumerate(documents):
            if doc is None:
                continue
            origin = f"{path}#doc{doc_index + 1}"
            if not isinstance(doc, dict):
                sys.stderr.write(f"[phlint] Skipping {origin}: expected a mapping.\n")
                continue
            _apply_config_document(config, doc, origin)

    return config


def _apply_config_document(config: LintConfig, doc: Dict[str, Any], origin: str) -> None:
    if "default_severity" in doc:
        config.default_severity = _parse_severity(doc["default_severity"], origin)

    for raw_code, raw_severity in _section(doc, "severity", origin).items():
        config.severity_overrides[_parse_rule_code(raw_code, origin)] = _parse_severity(
            raw_severity, origin
        )

    deprecated = dict(config.deprecated_functions)
    for name, message in _section(doc, "deprecated_functions", origin).items():
        deprecated[str(name).lower()] = "" if message is None else str(message)
    config.deprecated_functions = MappingProxyType(deprecated)

    config.unsafe_functions = _merge_param_table(
        config.unsafe_functions, _section(doc, "unsafe_functions", origin), origin
    )
    config.unsafe_constructors = _merge_param_table(
        config.unsafe_constructors, _section(doc, "unsafe_constructors", origin), origin
    )


def _section(doc: Dict[str, Any], key: str, origin: str) -> Dict[Any, Any]:
    value = doc.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"{origin}: '{key}' must be a mapping")
    return value


def _parse_severity(value: Any, origin: str) -> str:
    severity = str(value).lower()
    if severity not in SEVERITIES:
        raise ConfigurationError(
            f"{origin}: unknown severity {value!r} (expected one of {', '.join(SEVERITIES)})"
        )
    return severity


def _parse_rule_code(value: Any, origin: str) -> RuleCode:
    text = str(value).strip()
    if text.upper().startswith(LINTER_NAME) and text[len(LINTER_NAME):].isdigit():
        text = text[len(LINTER_NAME):]
    try:
        if text.isdigit():
            return RuleCode(int(text))
        return RuleCode[text.upper()]
    except (KeyError, ValueError) as exc:
        raise ConfigurationError(f"{origin}: unknown rule code {value!r}") from exc


def _merge_param_table(
    base: Mapping[str, int],
    updates: Dict[Any, Any],
    origin: str,
) -> Mapping[str, int]:
    merged = dict(base)
    for name, index in updates.items():
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise ConfigurationError(
                f"{origin}: parameter index for {name!r} must be a non-negative integer"
            )
        merged[str(name).lower()] = index
    return MappingProxyType(merged)


# ============================================================
# ==================== TREE PROVIDERS ========================
# ============================================================

class TreeProvider:
    """
    Supplies syntax trees to the linter. `get_tree_for_source` returns None
    when a unit cannot be parsed; the linter then skips it silently.
    """

    def will_lint_paths(self, paths: Sequence[str]) -> None:
        """Hook called once with every path before linting starts."""

    def get_tree_for_source(self, unit: str) -> Optional[SyntaxNode]:
        raise NotImplementedError


_LITERAL_STRING_TYPES = frozenset({"string", "nowdoc"})
_INTERPOLATED_STRING_TYPES = frozenset({"encapsed_string", "heredoc"})
_LITERAL_PART_TYPES = frozenset({
    "string",
    "string_content",
    "string_value",
    "escape_sequence",
    "heredoc_start",
    "heredoc_body",
    "heredoc_end",
})
_IGNORED_ARGUMENT_TYPES = frozenset({"comment", "variadic_placeholder"})


class TreeSitterTreeProvider(TreeProvider):
    """
    Parses PHP with tree-sitter and translates the concrete tree into
    SyntaxNodes. Sources with syntax errors yield None.
    """

    def __init__(self) -> None:
        self._parser = Parser(PHP_LANGUAGE)
        self._reported: Set[Tuple[str, str]] = set()

    def get_tree_for_source(self, unit: str) -> Optional[SyntaxNode]:
        try:
            with open(unit, "rb") as handle:
                source = handle.read()
        except FileNotFoundError:
            self._warn_once(unit, "missing", f"Input file not found: {unit}")
            return None
        except OSError as exc:
            self._warn_once(unit, "unreadable", f"Could not read {unit}: {exc}")
            return None
        return self.parse_source(source, unit)

    def parse_source(self, source: Union[str, bytes], path: str = "<source>") -> Optional[SyntaxNode]:
        if isinstance(source, str):
            source = source.encode("utf-8")
        tree = self._parser.parse(source)
        if tree.root_node.has_error:
            self._warn_once(path, "syntax", f"Syntax error in {path}; skipping.")
            return None
        return _translate_tree(tree.root_node, path)

    def _warn_once(self, path: str, reason: str, message: str) -> None:
        key = (path, reason)
        if key in self._reported:
            return
        sys.stderr.write(f"[phlint] {message}\n")
        self._reported.add(key)


def _node_text(node: Node) -> str:
    return node.text.decode("utf-8", errors="replace") if node.text else ""


def _make_source_range(node: Node, path: str) -> SourceRange:
    return SourceRange(
        file=path,
        line_start=node.start_point[0] + 1,
        col_start=node.start_point[1] + 1,
        line_end=node.end_point[0] + 1,
        col_end=node.end_point[1] + 1,
    )


def _translate_tree(root: Node, path: str) -> SyntaxNode:
    """
    Convert a tree-sitter tree into SyntaxNodes. Post-order walk on an
    explicit stack: nesting depth (long `.` chains) is bounded only by memory.
    Each SyntaxNode is built once all of its children exist.
    """
    kind, parts = _plan_node(root)
    stack: List[Tuple[Node, NodeKind, List[Node], List[SyntaxNode]]] = [(root, kind, parts, [])]
    while True:
        node, kind, parts, built = stack[-1]
        if len(built) < len(parts):
            child = parts[len(built)]
            child_kind, child_parts = _plan_node(child)
            stack.append((child, child_kind, child_parts, []))
            continue

        stack.pop()
        syntax_node = _finish_node(node, kind, tuple(built), path)
        if not stack:
            return syntax_node
        stack[-1][3].append(syntax_node)


def _plan_node(node: Node) -> Tuple[NodeKind, List[Node]]:
    """Pick the node's kind and the tree-sitter nodes that become its children."""
    named = node.named_children

    if node.type == "function_call_expression":
        function = node.child_by_field_name("function")
        if function is None:
            return NodeKind.OTHER, named
        arguments = node.child_by_field_name("arguments")
        return NodeKind.CALL, [function] if arguments is None else [function, arguments]

    if node.type == "object_creation_expression":
        class_node = next((child for child in named if child.type != "arguments"), None)
        if class_node is None:
            return NodeKind.OTHER, named
        arguments = next((child for child in named if child.type == "arguments"), None)
        children = [class_node]
        if arguments is not None:
            children.append(arguments)
        # Anything else (an anonymous class body) still needs to be reachable.
        children.extend(
            child for child in named if child is not class_node and child is not arguments
        )
        return NodeKind.NEW, children

    if node.type == "arguments":
        values: List[Node] = []
        for child in named:
            if child.type in _IGNORED_ARGUMENT_TYPES:
                continue
            if child.type == "argument":
                parts = [part for part in child.named_children if part.type != "comment"]
                # Named arguments carry their label first; the value is last.
                values.append(parts[-1] if parts else child)
            else:
                values.append(child)
        return NodeKind.ARGUMENT_LIST, values

    if node.type in _LITERAL_STRING_TYPES or node.type in _INTERPOLATED_STRING_TYPES:
        return NodeKind.STRING_LITERAL, named

    return NodeKind.OTHER, named


def _finish_node(
    node: Node,
    kind: NodeKind,
    children: Tuple[SyntaxNode, ...],
    path: str,
) -> SyntaxNode:
    constant = False
    if node.type in _LITERAL_STRING_TYPES:
        constant = True
    elif node.type in _INTERPOLATED_STRING_TYPES:
        constant = _is_literal_only(node)
    elif node.type == "binary_expression":
        constant = _is_constant_concatenation(node, children)

    return SyntaxNode(
        kind=kind,
        source_text=_node_text(node),
        children=children,
        constant_string=constant,
        type_name=node.type,
        source_range=_make_source_range(node, path),
    )


def _is_literal_only(node: Node) -> bool:
    pending = list(node.named_children)
    while pending:
        part = pending.pop()
        if part.type not in _LITERAL_PART_TYPES:
            return False
        pending.extend(part.named_children)
    return True


def _is_constant_concatenation(node: Node, children: Tuple[SyntaxNode, ...]) -> bool:
    operator = node.child_by_field_name("operator")
    if operator is None or _node_text(operator) != ".":
        return False
    return len(children) == 2 and all(child.constant_string for child in children)


# ============================================================
# ======================== LINTER ============================
# ============================================================

class PhutilLinter:
    """
    Entry point for the host lint framework.

    - takes a TreeProvider (required) and an optional LintConfig
    - lint(unit) fetches the unit's tree and runs all four rules over it
    - no state is carried from one tree to the next
    """

    linter_name = LINTER_NAME
    cache_version = CACHE_VERSION

    def __init__(self, tree_provider: TreeProvider, config: Optional[LintConfig] = None) -> None:
        if tree_provider is None or not hasattr(tree_provider, "get_tree_for_source"):
            raise ConfigurationError(
                "PhutilLinter requires a TreeProvider; pass one to the constructor."
            )
        self._tree_provider = tree_provider
        self._config = config or LintConfig()

    @property
    def config(self) -> LintConfig:
        return self._config

    def will_lint_paths(self, paths: Sequence[str]) -> None:
        self._tree_provider.will_lint_paths(paths)

    def lint(self, unit: str) -> List[Finding]:
        root = self._tree_provider.get_tree_for_source(unit)
        if root is None:
            return []
        return self.lint_tree(root)

    def lint_tree(self, root: SyntaxNode) -> List[Finding]:
        config = self._config
        findings: List[Finding] = []
        findings.extend(lint_pht(root))
        findings.extend(lint_array_combine(root))
        findings.extend(
            lint_unsafe_dynamic_string(
                root, config.unsafe_functions, config.unsafe_constructors
            )
        )
        findings.extend(lint_deprecated_functions(root, config.deprecated_functions))
        return findings

    def lint_name_map(self) -> Mapping[RuleCode, str]:
        return LINT_NAME_MAP

    def lint_severity_map(self) -> Mapping[RuleCode, str]:
        return LINT_SEVERITY_MAP

    def severity_for(self, code: RuleCode) -> str:
        override = self._config.severity_overrides.get(code)
        if override is not None:
            return override
        return LINT_SEVERITY_MAP.get(code, self._config.default_severity)


# ============================================================
# ===================== FINDING OUTPUT =======================
# ============================================================

def _node_location(node: SyntaxNode) -> Dict[str, Any]:
    source_range = node.source_range
    if source_range is None:
        return {
            "file": "<unknown>",
            "line_start": 0,
            "col_start": 0,
            "line_end": 0,
            "col_end": 0,
        }
    return {
        "file": source_range.file,
        "line_start": source_range.line_start,
        "col_start": source_range.col_start,
        "line_end": source_range.line_end,
        "col_end": source_range.col_end,
    }


def finding_to_json_obj(finding: Finding, severity: str) -> Dict[str, Any]:
    """
    Convert a Finding into a JSON-friendly dict with a stable field order.
    """
    return {
        "code": finding.full_code,
        "name": finding.name,
        "severity": severity,
        "message": finding.message,
        "location": _node_location(finding.location),
        "source": finding.location.source_text,
        "tool": "phlint",
        "version": __version__,
    }


def emit_findings_json(
    findings: Sequence[Tuple[Finding, str]],
    out: Optional[str] = None,
) -> None:
    as_json = [finding_to_json_obj(finding, severity) for finding, severity in findings]
    text = json.dumps(as_json, indent=2, sort_keys=False)
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
    else:
        print(text)


# ============================================================
# ============================ CLI ===========================
# ============================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.
      phlint analyze [--config lint.yaml] src/a.php src/b.php ...
    """
    parser = argparse.ArgumentParser(
        prog="phlint",
        description="phlint: libphutil call-shape lint rules for PHP",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_p = subparsers.add_parser(
        "analyze",
        help="Lint one or more PHP files and emit JSON findings.",
    )
    analyze_p.add_argument(
        "--config",
        nargs="+",
        metavar="CONFIG_FILE",
        help="YAML config file(s).",
        required=False,
    )
    analyze_p.add_argument(
        "--out",
        metavar="OUT_JSON",
        help="Write findings to this JSON file instead of stdout.",
        required=False,
    )
    analyze_p.add_argument(
        "files",
        nargs="+",
        help="PHP source files to lint.",
    )

    args = parser.parse_args(argv)

    if args.command == "analyze":
        try:
            config = load_config_from_yaml(args.config or [])
        except ConfigurationError as exc:
            sys.stderr.write(f"[phlint] {exc}\n")
            return 1

        linter = PhutilLinter(TreeSitterTreeProvider(), config)
        linter.will_lint_paths(args.files)

        results: List[Tuple[Finding, str]] = []
        for path in args.files:
            for finding in linter.lint(path):
                severity = linter.severity_for(finding.code)
                if severity == SEVERITY_DISABLED:
                    continue
                results.append((finding, severity))

        emit_findings_json(results, out=args.out)
        return 0

    # unreachable if parser is correct
    return 1


if __name__ == "__main__":
    sys.exit(main())
