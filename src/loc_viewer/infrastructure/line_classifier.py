"""Default language classifier — implements the LanguageClassifier port.

Languages are recognised by file name first, then by extension.  Lines are
counted with a small comment-syntax table: a line is *blank* when it holds
only whitespace, *comment* when everything on it sits inside a comment, and
*code* otherwise.  String literals are not tokenised, so a comment marker
inside a string ends the code part of that line early.
"""

from __future__ import annotations

from dataclasses import dataclass

from loc_viewer.domain.entities import LanguageId, LineCounts


@dataclass(frozen=True, slots=True)
class LanguageSyntax:
    """Comment syntax of one language."""

    name: LanguageId
    extensions: tuple[str, ...] = ()
    filenames: tuple[str, ...] = ()
    line_comments: tuple[str, ...] = ()
    block_comments: tuple[tuple[str, str], ...] = ()
    nested: bool = False


_C_BLOCK = (("/*", "*/"),)
_XML_BLOCK = (("<!--", "-->"),)

LANGUAGES: tuple[LanguageSyntax, ...] = (
    LanguageSyntax("C", (".c", ".h"), (), ("//",), _C_BLOCK),
    LanguageSyntax("C++", (".cc", ".cpp", ".cxx", ".hh", ".hpp", ".hxx"), (), ("//",), _C_BLOCK),
    LanguageSyntax("C#", (".cs",), (), ("//",), _C_BLOCK),
    LanguageSyntax("CMake", (".cmake",), ("cmakelists.txt",), ("#",)),
    LanguageSyntax("CSS", (".css",), (), (), _C_BLOCK),
    LanguageSyntax("Dart", (".dart",), (), ("//",), _C_BLOCK, nested=True),
    LanguageSyntax("Dockerfile", (".dockerfile",), ("dockerfile",), ("#",)),
    LanguageSyntax("Elixir", (".ex", ".exs"), (), ("#",)),
    LanguageSyntax("Go", (".go",), (), ("//",), _C_BLOCK),
    LanguageSyntax("Haskell", (".hs",), (), ("--",), (("{-", "-}"),), nested=True),
    LanguageSyntax("HTML", (".htm", ".html"), (), (), _XML_BLOCK),
    LanguageSyntax("Java", (".java",), (), ("//",), _C_BLOCK),
    LanguageSyntax("JavaScript", (".cjs", ".js", ".jsx", ".mjs"), (), ("//",), _C_BLOCK),
    LanguageSyntax("JSON", (".json",)),
    LanguageSyntax("Kotlin", (".kt", ".kts"), (), ("//",), _C_BLOCK, nested=True),
    LanguageSyntax("Lua", (".lua",), (), ("--",), (("--[[", "]]"),)),
    LanguageSyntax("Makefile", (".mk",), ("makefile", "gnumakefile"), ("#",)),
    LanguageSyntax("Perl", (".pl", ".pm"), (), ("#",)),
    LanguageSyntax("PHP", (".php",), (), ("//", "#"), _C_BLOCK),
    LanguageSyntax("Python", (".py", ".pyi", ".pyw"), (), ("#",)),
    LanguageSyntax("R", (".r",), (), ("#",)),
    LanguageSyntax("Ruby", (".rb",), ("gemfile", "rakefile"), ("#",), (("=begin", "=end"),)),
    LanguageSyntax("Rust", (".rs",), (), ("//",), _C_BLOCK, nested=True),
    LanguageSyntax("Sass", (".sass", ".scss"), (), ("//",), _C_BLOCK),
    LanguageSyntax("Scala", (".sc", ".scala"), (), ("//",), _C_BLOCK, nested=True),
    LanguageSyntax("Shell", (".bash", ".sh", ".zsh"), (), ("#",)),
    LanguageSyntax("SQL", (".sql",), (), ("--",), _C_BLOCK),
    LanguageSyntax("Swift", (".swift",), (), ("//",), _C_BLOCK, nested=True),
    LanguageSyntax("TOML", (".toml",), (), ("#",)),
    LanguageSyntax("TSX", (".tsx",), (), ("//",), _C_BLOCK),
    LanguageSyntax("TypeScript", (".cts", ".mts", ".ts"), (), ("//",), _C_BLOCK),
    LanguageSyntax("Vue", (".vue",), (), ("//",), _C_BLOCK + _XML_BLOCK),
    LanguageSyntax("XML", (".xml", ".xsd", ".xsl"), (), (), _XML_BLOCK),
    LanguageSyntax("YAML", (".yaml", ".yml"), (), ("#",)),
)


class ExtensionLanguageClassifier:
    """Classifies files by name/extension and counts lines by comment syntax."""

    def __init__(self, languages: tuple[LanguageSyntax, ...] = LANGUAGES) -> None:
        self._syntax: dict[LanguageId, LanguageSyntax] = {}
        self._by_ext: dict[str, LanguageSyntax] = {}
        self._by_name: dict[str, LanguageSyntax] = {}
        for syntax in languages:
            self._syntax[syntax.name] = syntax
            for ext in syntax.extensions:
                self._by_ext[ext.lower()] = syntax
            for filename in syntax.filenames:
                self._by_name[filename.lower()] = syntax

    def classify_path(self, path: str) -> LanguageId | None:
        name = path.rsplit("/", maxsplit=1)[-1].lower()
        syntax = self._by_name.get(name)
        if syntax is None:
            dot = name.rfind(".")
            if dot <= 0:
                return None
            syntax = self._by_ext.get(name[dot:])
        return syntax.name if syntax else None

    def analyze(self, language: LanguageId, content: str) -> LineCounts:
        try:
            syntax = self._syntax[language]
        except KeyError:
            raise ValueError(f"Unknown language: {language!r}") from None
        return count_lines(syntax, content)


def count_lines(syntax: LanguageSyntax, content: str) -> LineCounts:
    """Count code, comment and blank lines of *content*."""
    code = comments = blanks = 0
    depth = 0
    active: tuple[str, str] | None = None

    for line in content.splitlines():
        text = line.strip()
        if not text:
            blanks += 1
            continue

        has_code = False
        i = 0
        while i < len(text):
            if active is not None:
                start, end = active
                if syntax.nested and text.startswith(start, i):
                    depth += 1
                    i += len(start)
                elif text.startswith(end, i):
                    depth -= 1
                    i += len(end)
                    if depth == 0:
                        active = None
                else:
                    i += 1
                continue

            if any(text.startswith(marker, i) for marker in syntax.line_comments):
                # a block opener can share a prefix with the line marker (Lua)
                opener = _block_opener(syntax, text, i)
                if opener is None:
                    break
            else:
                opener = _block_opener(syntax, text, i)

            if opener is not None:
                active = opener
                depth = 1
                i += len(opener[0])
                continue

            if not text[i].isspace():
                has_code = True
            i += 1

        if has_code:
            code += 1
        else:
            comments += 1

    return LineCounts(code=code, comments=comments, blanks=blanks)


def _block_opener(
    syntax: LanguageSyntax, text: str, i: int
) -> tuple[str, str] | None:
    for pair in syntax.block_comments:
        if text.startswith(pair[0], i):
            return pair
    return None
