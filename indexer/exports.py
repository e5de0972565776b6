"""Syntactic export discovery for TypeScript sources using regex."""

from dataclasses import dataclass
import re
from typing import List, Optional

from core.errors import ParseError

_EXPORT_RE = re.compile(r'(?<![\w$.])export\b')

_DECLARATION_RE = re.compile(
    r'[ \t]*export\s+'
    r'(?P<default>default\s+)?'
    r'(?:declare\s+)?'
    r'(?P<type>(?:abstract\s+)?class|interface|(?:async\s+)?function\s*\*?'
    r'|const\s+enum\b|const|let|var|enum|type|namespace|module)'
    r'\s*(?P<name>[A-Za-z_$][\w$]*)'
)

_EXPORT_LIST_RE = re.compile(r'[ \t]*export\s+(?:type\s+)?\{(?P<names>[^}]*)\}')

_RESERVED = {"extends", "implements", "from"}

_WORD_RE = re.compile(r'[\w$]+')

# A '/' after one of these starts a regex literal rather than a division
_REGEX_PRECEDERS = set("(,=:[!&|?{};+-*%~^")
_REGEX_KEYWORDS = {
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await",
}


@dataclass(frozen=True)
class ExportDeclaration:
    """A top-level exported name found in a source file."""
    name: str
    type_text: Optional[str]
    line: int


def _regex_end(content: str, start: int) -> Optional[int]:
    """Index of the '/' closing the regex literal opened at ``start``, None if the line ends first."""
    in_class = False
    j = start + 1
    n = len(content)
    while j < n:
        ch = content[j]
        if ch == "\n":
            return None
        if ch == "\\":
            j += 2
            continue
        if in_class:
            if ch == "]":
                in_class = False
        elif ch == "[":
            in_class = True
        elif ch == "/":
            return j
        j += 1
    return None


def mask_source(path: str, content: str) -> str:
    """
    Blank out comments, string contents and regex literals, keeping offsets
    and newlines.

    Template literal substitutions stay visible as code. In .tsx/.jsx files a
    quote inside JSX text (an apostrophe after a letter, or a quote that never
    closes on its line) is blanked on its own. Raises ParseError on
    unterminated comments, strings or templates.
    """
    jsx = path.endswith((".tsx", ".jsx"))
    out = list(content)
    i = 0
    n = len(content)
    line = 1
    # Each entry is the brace depth inside an open ${...} substitution
    template_stack: List[int] = []
    in_template = False
    # Last significant token: a punctuation character, or "a" for a value
    prev: Optional[str] = None
    prev_word: Optional[str] = None
    line_start = True

    def blank(start: int, end: int):
        for k in range(start, end):
            if out[k] != "\n":
                out[k] = " "

    while i < n:
        ch = content[i]
        if in_template:
            if ch == "\\":
                blank(i, min(i + 2, n))
                if content[i + 1:i + 2] == "\n":
                    line += 1
                i += 2
                continue
            if ch == "`":
                in_template = False
                prev, prev_word = "a", None
                i += 1
                continue
            if content.startswith("${", i):
                blank(i, i + 2)
                template_stack.append(0)
                in_template = False
                prev, prev_word = "{", None
                i += 2
                continue
            if ch == "\n":
                line += 1
            else:
                out[i] = " "
            i += 1
            continue

        if ch == "\n":
            line += 1
            line_start = True
            i += 1
        elif ch.isspace():
            i += 1
        elif content.startswith("//", i):
            end = content.find("\n", i)
            end = n if end < 0 else end
            blank(i, end)
            i = end
        elif content.startswith("/*", i):
            end = content.find("*/", i + 2)
            if end < 0:
                raise ParseError(path, "Unterminated block comment", line)
            line += content.count("\n", i, end)
            blank(i, end + 2)
            i = end + 2
        elif ch in ("'", '"'):
            if jsx and i > 0 and (content[i - 1].isalnum() or content[i - 1] == "_"):
                out[i] = " "
                i += 1
                continue
            j = i + 1
            newlines = 0
            while j < n and content[j] != ch:
                if content[j] == "\\":
                    if content[j + 1:j + 2] == "\n":
                        newlines += 1
                    j += 2
                    continue
                if content[j] == "\n":
                    break
                j += 1
            if j >= n or content[j] != ch:
                if jsx:
                    out[i] = " "
                    i += 1
                    continue
                raise ParseError(path, "Unterminated string literal", line)
            blank(i + 1, j)
            line += newlines
            prev, prev_word = "a", None
            line_start = False
            i = j + 1
        elif ch == "`":
            in_template = True
            line_start = False
            i += 1
        elif ch == "/":
            starts_regex = line_start or prev is None or prev in _REGEX_PRECEDERS or prev_word in _REGEX_KEYWORDS
            if jsx and content.startswith("/>", i):
                # Self-closing tag, as in <Item key={id} />
                starts_regex = False
            end = _regex_end(content, i) if starts_regex else None
            if end is not None:
                blank(i + 1, end)
                prev, prev_word = "a", None
                i = end + 1
            else:
                prev, prev_word = "/", None
                i += 1
            line_start = False
        else:
            word = _WORD_RE.match(content, i)
            if word:
                prev, prev_word = "a", word.group()
                i = word.end()
            else:
                if template_stack and ch == "{":
                    template_stack[-1] += 1
                elif template_stack and ch == "}":
                    if template_stack[-1] == 0:
                        template_stack.pop()
                        out[i] = " "
                        in_template = True
                    else:
                        template_stack[-1] -= 1
                # '=>' behaves like '=' before a regex
                if not (ch == ">" and content[i - 1:i] == "="):
                    prev = ch
                prev_word = None
                i += 1
            line_start = False

    if in_template or template_stack:
        raise ParseError(path, "Unterminated template literal", line)
    return "".join(out)


class TypeScriptExportParser:
    """Finds top-level exported declarations in a TypeScript file."""

    def parse(self, path: str, content: str) -> List[ExportDeclaration]:
        """
        Parse exported declarations.

        Args:
            path: File path, used for error messages
            content: File content

        Returns:
            Declarations in source order

        Raises:
            ParseError: if braces are unbalanced or a comment/string never ends
        """
        masked = mask_source(path, content)
        export_starts = {match.start() for match in _EXPORT_RE.finditer(masked)}
        declarations: List[ExportDeclaration] = []

        depth = 0
        open_lines: List[int] = []
        lineno = 1
        for pos, ch in enumerate(masked):
            if ch == "\n":
                lineno += 1
            elif ch == "{":
                depth += 1
                open_lines.append(lineno)
            elif ch == "}":
                depth -= 1
                if depth < 0:
                    raise ParseError(path, "Unexpected '}'", lineno)
                open_lines.pop()
            elif depth == 0 and pos in export_starts:
                declarations.extend(self._parse_export(masked, pos, lineno))

        if depth > 0:
            raise ParseError(path, "Unclosed '{'", open_lines[-1])

        return declarations

    def _parse_export(self, masked: str, offset: int, lineno: int) -> List[ExportDeclaration]:
        match = _DECLARATION_RE.match(masked, offset)
        if match:
            if match.group("default") or match.group("name") in _RESERVED:
                # Default exports are not importable as named bindings
                return []
            type_text = " ".join(match.group("type").replace("*", " ").split())
            return [ExportDeclaration(match.group("name"), type_text, lineno)]

        match = _EXPORT_LIST_RE.match(masked, offset)
        if match:
            names = []
            for item in match.group("names").split(","):
                parts = item.split()
                if not parts:
                    continue
                if parts[0] == "type" and len(parts) > 1:
                    parts = parts[1:]
                exported = parts[-1] if len(parts) == 3 and parts[1] == "as" else parts[0]
                if exported == "default":
                    continue
                names.append(ExportDeclaration(exported, None, lineno))
            return names

        return []
