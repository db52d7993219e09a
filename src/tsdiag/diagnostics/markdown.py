"""Default markdown rendering of diagnostic messages.

The output is the input of the text formatter (see format.py), which
relies on its shape:

- line 1 is the title behind a three-character heading marker
- object types are fenced ``typescript`` blocks, other quoted names inline code
- error-reference and search links use the 🔗 / 🌐 icons
- related locations are ``['name' 📄](uri#Lline)`` links
"""

from __future__ import annotations

import posixpath
import re
from urllib.parse import quote_plus, unquote, urlparse

from tsdiag.diagnostics.models import NormalizedDiagnostic, RelatedInformation

HEADING_MARKER = "## "
ERROR_REFERENCE_URL = "https://typescript.tv/errors/#ts{code}"
SEARCH_URL = "https://www.google.com/search?q=typescript+{query}"

_QUOTED_RE = re.compile(r"'([^'\n]+)'")


def _continue(text: str, indent: str, after_fence: bool) -> str:
    # Text following a fence restarts at the line's own indentation
    return indent + text.lstrip() if after_fence else text


def _render_line(line: str) -> list[str]:
    """Render one message line; object types split out into fenced blocks."""
    indent = line[: len(line) - len(line.lstrip())]
    out: list[str] = []
    current = ""
    after_fence = False
    pos = 0
    for match in _QUOTED_RE.finditer(line):
        value = match.group(1)
        current += _continue(line[pos : match.start()], indent, after_fence)
        after_fence = False
        if value.lstrip().startswith("{"):
            if current.strip():
                out.append(current.rstrip())
            out.extend([f"{indent}```typescript", f"{indent}{value}", f"{indent}```"])
            current = ""
            after_fence = True
        else:
            current += f"`{value}`"
        pos = match.end()
    current += _continue(line[pos:], indent, after_fence)
    if current.strip():
        out.append(current)
    return out or [line]


def _inline_only(line: str) -> str:
    return _QUOTED_RE.sub(lambda m: f"`{m.group(1)}`", line)


def _file_name(uri: str) -> str:
    path = unquote(urlparse(uri).path) if "://" in uri else uri
    return posixpath.basename(path) or uri


def _related_line(info: RelatedInformation) -> str:
    uri = info.location.uri
    line = info.location.range.start_line + 1
    return f"['{_file_name(uri)}' 📄]({uri}#L{line}) {_inline_only(info.message)}".rstrip()


def render_markdown(diagnostic: NormalizedDiagnostic) -> str:
    """Render a diagnostic message as markdown."""
    title, *rest = diagnostic.message.split("\n")
    lines = [HEADING_MARKER + _inline_only(title)]
    for line in rest:
        lines.extend(_render_line(line))

    if diagnostic.code is not None:
        lines.append(
            f"[🔗]({ERROR_REFERENCE_URL.format(code=diagnostic.code)}) "
            f"[🌐]({SEARCH_URL.format(query=quote_plus(title))})"
        )

    for info in diagnostic.related_information or ():
        lines.append(_related_line(info))

    return "\n".join(lines)
