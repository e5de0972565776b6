"""Fixed-format scanning and editing of top-level import declarations."""

from dataclasses import dataclass, field
import logging
import re
from typing import List, Optional, Tuple

from core.errors import ParseError
from indexer.exports import mask_source

logger = logging.getLogger(__name__)

_IMPORT_FROM_RE = re.compile(
    r'^import[ \t]+(?P<clause>(?:(?!\nimport\b)[^;\'"])*?)(?:\s+|(?<=\}))from\s*(?P<quote>[\'"])(?P<specifier>[^\'"\n]*)(?P=quote)[ \t]*;?',
    re.M,
)
_SIDE_EFFECT_RE = re.compile(r'^import[ \t]*(?P<quote>[\'"])(?P<specifier>[^\'"\n]*)(?P=quote)[ \t]*;?', re.M)
_REQUIRE_RE = re.compile(
    r'^import[ \t]+(?P<local>[\w$]+)[ \t]*=[ \t]*require\([ \t]*(?P<quote>[\'"])(?P<specifier>[^\'"\n]*)(?P=quote)[ \t]*\)[ \t]*;?',
    re.M,
)
_TYPE_ONLY_RE = re.compile(r'^type\s+(?!from\b)(?=[{*\w$])')
_NAMESPACE_RE = re.compile(r'\*\s*as\s+(?P<name>[\w$]+)')
_IDENT_RE = re.compile(r'[\w$]+')
_LINE_COMMENT_RE = re.compile(r'//[^\n]*')
_DECLARATION_START_RE = re.compile(
    r'(?:export|declare|abstract|async|class|interface|function|const|let|var|type|enum|namespace|module)\b|@'
)


@dataclass
class ImportDeclaration:
    """A top-level import statement, with offsets into the document text."""
    start: int
    end: int
    specifier: str
    quote: str = "'"
    default: Optional[str] = None
    default_end: Optional[int] = None
    namespace: Optional[str] = None
    named: List[Tuple[str, str]] = field(default_factory=list)  # (imported, local)
    brace_start: Optional[int] = None
    brace_end: Optional[int] = None  # offset of the closing brace
    type_only: bool = False
    side_effect: bool = False

    def local_names(self) -> List[str]:
        names = [local for _, local in self.named]
        if self.default:
            names.append(self.default)
        if self.namespace:
            names.append(self.namespace)
        return names

    def imports_named(self, name: str) -> bool:
        return (name, name) in self.named

    @property
    def mergeable(self) -> bool:
        return not (self.type_only or self.side_effect or self.namespace)


def _mask(text: str) -> str:
    try:
        return mask_source("<document>", text)
    except ParseError as e:
        # Documents are often mid-edit; scan the raw text instead
        logger.debug(f"Scanning imports without masking: {e}")
        return text


def _parse_clause(decl: ImportDeclaration, masked: str, clause_start: int, clause_end: int):
    clause = masked[clause_start:clause_end]
    offset = clause_start

    type_match = _TYPE_ONLY_RE.match(clause)
    if type_match:
        decl.type_only = True
        offset += type_match.end()
        clause = clause[type_match.end():]

    brace_open = clause.find("{")
    if brace_open >= 0:
        brace_close = clause.rfind("}")
        decl.brace_start = offset + brace_open
        decl.brace_end = offset + brace_close
        for item in clause[brace_open + 1:brace_close].split(","):
            parts = item.split()
            if not parts:
                continue
            if parts[0] == "type" and len(parts) > 1:
                parts = parts[1:]
            if len(parts) == 3 and parts[1] == "as":
                decl.named.append((parts[0], parts[2]))
            else:
                decl.named.append((parts[0], parts[0]))
        head = clause[:brace_open]
    else:
        namespace = _NAMESPACE_RE.search(clause)
        if namespace:
            decl.namespace = namespace.group("name")
            head = clause[:namespace.start()]
        else:
            head = clause

    default = _IDENT_RE.search(head)
    if default:
        decl.default = default.group(0)
        decl.default_end = offset + default.end()


def scan_imports(text: str) -> List[ImportDeclaration]:
    """Find top-level import declarations (those starting at column 0), in document order."""
    masked = _mask(text)
    declarations: List[ImportDeclaration] = []

    for match in _IMPORT_FROM_RE.finditer(masked):
        start, end = match.span("specifier")
        decl = ImportDeclaration(
            start=match.start(),
            end=match.end(),
            specifier=text[start:end],
            quote=match.group("quote"),
        )
        _parse_clause(decl, masked, match.start("clause"), match.end("clause"))
        declarations.append(decl)

    for match in _SIDE_EFFECT_RE.finditer(masked):
        start, end = match.span("specifier")
        declarations.append(ImportDeclaration(
            start=match.start(),
            end=match.end(),
            specifier=text[start:end],
            quote=match.group("quote"),
            side_effect=True,
        ))

    for match in _REQUIRE_RE.finditer(masked):
        start, end = match.span("specifier")
        declarations.append(ImportDeclaration(
            start=match.start(),
            end=match.end(),
            specifier=text[start:end],
            quote=match.group("quote"),
            namespace=match.group("local"),
        ))

    declarations.sort(key=lambda d: d.start)
    return declarations


def _append_to_braces(content: str, binding: str, spacing: bool) -> str:
    """Append a binding to the text between braces, keeping existing layout."""
    stripped = content.rstrip()
    tail = content[len(stripped):]
    if not stripped.strip():
        pad = " " if spacing else ""
        return f"{pad}{binding}{pad}"

    # The separating comma goes after the last binding, before any line comment
    code = _LINE_COMMENT_RE.sub(lambda m: " " * len(m.group()), stripped).rstrip()
    trailing_comma = code.endswith(",")
    if code.strip() and not trailing_comma:
        stripped = stripped[:len(code)] + "," + stripped[len(code):]

    if "\n" in content:
        last_line = stripped.rsplit("\n", 1)[-1]
        indent = last_line[:len(last_line) - len(last_line.lstrip())]
        return f"{stripped}\n{indent}{binding}{',' if trailing_comma else ''}{tail}"

    if trailing_comma:
        return f"{stripped} {binding},{tail}"
    return f"{stripped} {binding}{tail}"


def merge_binding(text: str, decl: ImportDeclaration, binding: str, spacing: bool = True) -> str:
    """
    Return the declaration's text with ``binding`` added to its named imports.

    Existing bindings are kept verbatim and the new one goes last.
    """
    if decl.brace_start is not None:
        content = text[decl.brace_start + 1:decl.brace_end]
        merged = _append_to_braces(content, binding, spacing)
        return text[decl.start:decl.brace_start + 1] + merged + text[decl.brace_end:decl.end]

    if decl.default_end is not None:
        pad = " " if spacing else ""
        return text[decl.start:decl.default_end] + f", {{{pad}{binding}{pad}}}" + text[decl.default_end:decl.end]

    raise ValueError(f"Import of '{decl.specifier}' has no named bindings to merge into")


def header_end_offset(text: str) -> int:
    """
    Offset just past a leading shebang and comment block.

    A JSDoc block directly followed by a declaration documents that
    declaration and is not part of the header.
    """
    lines = text.split("\n")
    i = 0
    if lines and lines[0].startswith("#!"):
        i = 1
    jsdoc_start = None
    while i < len(lines):
        stripped = lines[i].strip()
        if stripped.startswith("//"):
            jsdoc_start = None
            i += 1
        elif stripped.startswith("/*"):
            jsdoc_start = i if stripped.startswith("/**") else None
            j = i
            rest = stripped[2:]
            while "*/" not in rest and j + 1 < len(lines):
                j += 1
                rest = lines[j]
            i = j + 1
        else:
            break
    if jsdoc_start is not None and i < len(lines) and _DECLARATION_START_RE.match(lines[i].lstrip()):
        i = jsdoc_start
    return min(sum(len(line) + 1 for line in lines[:i]), len(text))
