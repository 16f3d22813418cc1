"""JSON composition for request mapping templates.

Templates are assembled from three kinds of segment:

* plain ``str`` -- literal text. ``json_string`` escapes it once for every
  string literal it is placed in, so nesting an object inside a string
  (and that string inside another object) escapes exactly as deep as needed.
* ``Expression`` -- a mapping-template reference such as
  ``$context.requestId``. It is evaluated by API Gateway at request time and
  emitted verbatim at every nesting level; whatever it expands to must already
  be escaped for the place it lands in.
* ``Ref`` / ``GetAtt`` -- CloudFormation intrinsics, resolved at deploy time.

``coalesce`` folds the result into the segment list of an ``Fn::Join``.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence

from stepgate.methods.errors import TemplateAssemblyError
from stepgate.methods.models import GetAtt, Ref

Segment = str | Ref | GetAtt


class Expression(str):
    """A mapping-template expression, emitted as written."""

    __slots__ = ()


def escape(text: str) -> str:
    """Escape ``text`` for placement inside a JSON string literal."""
    return json.dumps(text, ensure_ascii=False)[1:-1]


def json_string(*parts: Segment) -> list[Segment]:
    """Render ``parts`` as one JSON string literal."""
    out: list[Segment] = ['"']
    for part in parts:
        if isinstance(part, Expression):
            if escape(part) != part:
                raise TemplateAssemblyError(
                    f"Expression {str(part)!r} cannot be embedded in a string literal",
                    field="RequestTemplates",
                )
            out.append(part)
        elif isinstance(part, str):
            out.append(escape(part))
        else:
            out.append(part)
    out.append('"')
    return out


def json_object(*members: tuple[str, Sequence[Segment]], rest: Expression | None = None) -> list[Segment]:
    """Render ``members`` (key, rendered value) as a JSON object.

    ``rest`` replaces the closing brace with an expression that expands to the
    remaining members and the brace itself.
    """
    out: list[Segment] = ["{"]
    for i, (key, value) in enumerate(members):
        if i:
            out.append(", ")
        out.extend(json_string(key))
        out.append(" : ")
        out.extend(value)
    out.append("}" if rest is None else rest)
    return out


def coalesce(segments: Iterable[Segment]) -> list[Segment]:
    """Merge adjacent text segments, keeping references in place."""
    out: list[Segment] = []
    for segment in segments:
        if isinstance(segment, str):
            if not segment:
                continue
            if out and isinstance(out[-1], str):
                out[-1] = out[-1] + segment
            else:
                out.append(str(segment))
        else:
            out.append(segment)
    return out
