"""Path template handling.

Route templates may constrain a parameter with a regex, as in
``/users/{id:[0-9]+}``. Swagger only knows ``{id}``, so the pattern is
moved out of the path and onto the matching path parameter.
"""

import re

from api_doc_builder.spec.errors import InvalidPathError

_TAG_RE = re.compile(r"<[^>]*>")


def sanitize_path(template: str) -> tuple[str, dict[str, str]]:
    """Strip regex constraints from named segments.

    Returns the sanitized path and a mapping of parameter name to pattern,
    e.g. ``/api/{name:[a-z]+}/`` -> ``("/api/{name}", {"name": "[a-z]+"})``.
    """
    segments = []
    patterns: dict[str, str] = {}
    for fragment in template.split("/"):
        if not fragment:
            continue
        if fragment.startswith("{") and ":" in fragment:
            name, _, pattern = fragment[1:].partition(":")
            if pattern.endswith("}"):
                pattern = pattern[:-1]
            patterns[name] = pattern
            fragment = "{" + name + "}"
        segments.append(fragment)
    return "/" + "/".join(segments), patterns


def concat_path(root: str, sub: str) -> str:
    """Join a service root and a route sub-path with a single separator."""
    return root.rstrip("/") + "/" + sub.lstrip("/")


def validate_template(template: str) -> None:
    """Raise InvalidPathError when a segment's braces do not balance."""
    for fragment in template.split("/"):
        depth = 0
        for index, char in enumerate(fragment):
            if char == "{":
                if depth == 0 and fragment[index + 1:index + 2] in ("}", ":"):
                    raise InvalidPathError(template, f"empty parameter name in segment {fragment!r}")
                depth += 1
            elif char == "}":
                depth -= 1
                if depth < 0:
                    raise InvalidPathError(template, f"unexpected '}}' in segment {fragment!r}")
        if depth != 0:
            raise InvalidPathError(template, f"unclosed '{{' in segment {fragment!r}")


def strip_tags(html: str) -> str:
    """Return the text content of a markup snippet, leaving entities intact.

    ``<b>&lt;Hi!&gt;</b> <br>`` -> ``&lt;Hi!&gt; ``
    """
    return _TAG_RE.sub("", html)
