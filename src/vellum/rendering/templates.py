"""Template expansion backed by Jinja2.

One :class:`TemplateEngine` serves a whole generation.  Page bodies and
permalinks are compiled from strings; snippets are loaded from the snippets
directory and rendered through the ``snippet()`` global with the caller's
context plus ``include``.  ``{% math %}...{% endmath %}`` blocks turn LaTeX
into inline MathML.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Undefined, nodes, pass_context
from jinja2 import TemplateError as JinjaTemplateError
from jinja2 import TemplateRuntimeError
from jinja2.ext import Extension
from jinja2.parser import Parser
from jinja2.runtime import Context as JinjaContext
from latex2mathml.converter import convert as latex_to_mathml

from vellum._errors import TemplateError


class MathExtension(Extension):
    """``{% math %}LaTeX{% endmath %}`` renders its body as inline MathML.

    The body is template text, so it may use variables; the expanded text
    is converted with latex2mathml.
    """

    tags = {"math"}

    def parse(self, parser: Parser) -> nodes.Node:
        lineno = next(parser.stream).lineno
        body = parser.parse_statements(("name:endmath",), drop_needle=True)
        return nodes.CallBlock(self.call_method("_to_mathml"), [], [], body).set_lineno(lineno)

    def _to_mathml(self, caller: Any) -> str:
        latex = caller().strip()
        try:
            return latex_to_mathml(latex, display="inline")
        except Exception as exc:
            msg = f"cannot convert math {latex!r}: {exc}"
            raise TemplateRuntimeError(msg) from exc


class TemplateEngine:
    """Render template text against a context mapping.

    Args:
        snippets_path: Directory ``snippet("name")`` resolves against.
        strict: Raise on undefined variables instead of rendering them empty.

    """

    def __init__(self, snippets_path: Path | None = None, *, strict: bool = False) -> None:
        searchpath = [str(snippets_path)] if snippets_path is not None else []
        self._env = Environment(
            loader=FileSystemLoader(searchpath),
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined if strict else Undefined,
            extensions=[MathExtension],
        )
        self._env.globals["snippet"] = self._snippet

    @property
    def env(self) -> Environment:
        return self._env

    def render(self, text: str, context: Mapping[str, Any]) -> str:
        """Expand ``text`` with ``context``.

        Raises:
            TemplateError: Syntax errors, undefined names in strict mode,
                missing snippets, or any exception raised while rendering.

        """
        try:
            return self._env.from_string(text).render(context)
        except TemplateError:
            raise
        except JinjaTemplateError as exc:
            raise TemplateError("<template>", _describe(exc)) from exc
        except Exception as exc:
            raise TemplateError("<template>", f"{type(exc).__name__}: {exc}") from exc

    __call__ = render

    @pass_context
    def _snippet(self, context: JinjaContext, name: str, **params: Any) -> str:
        try:
            template = self._env.get_template(name)
        except JinjaTemplateError as exc:
            raise TemplateError(f"snippets/{name}", _describe(exc)) from exc
        return template.render({**context.get_all(), "include": params})


def _describe(exc: JinjaTemplateError) -> str:
    lineno = getattr(exc, "lineno", None)
    where = f" (line {lineno})" if lineno else ""
    return f"{type(exc).__name__}: {exc.message or exc}{where}"
