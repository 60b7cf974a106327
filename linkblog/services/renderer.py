"""Turn link results into HTML fragments or JSON documents."""

from dataclasses import dataclass
from typing import Optional, Union

from fastapi import Response
from jinja2 import Environment, PackageLoader, TemplateError, select_autoescape
from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError

from linkblog.errors import RenderError, UnsupportedRenderType
from linkblog.schemas import LinkRead

HTML = "text/html"
JSON = "application/json"

DETAIL_VIEW = "detail"


@dataclass(frozen=True)
class LinkList:
    links: list[LinkRead]


@dataclass(frozen=True)
class SingleLink:
    link: LinkRead


RenderResult = Union[LinkList, SingleLink]

_links_adapter = TypeAdapter(list[LinkRead])


def create_environment() -> Environment:
    return Environment(
        loader=PackageLoader("linkblog", "templates"),
        autoescape=select_autoescape(["html"]),
    )


class LinkRenderer:
    """Renders results with templates compiled once per process."""

    def __init__(self, environment: Optional[Environment] = None) -> None:
        self.environment = environment or create_environment()

    def render(
        self,
        result: RenderResult,
        fragment: bool,
        view: Optional[str] = None,
    ) -> Response:
        if fragment:
            if isinstance(result, LinkList):
                body = self._render_template("list.html", links=result.links)
            elif isinstance(result, SingleLink):
                name = "detail.html" if view == DETAIL_VIEW else "link.html"
                body = self._render_template(name, link=result.link)
            else:
                raise UnsupportedRenderType(
                    "Unsupported data type for HTML fragment generation: "
                    f"{type(result).__name__}"
                )
            return Response(content=body, media_type=HTML)

        try:
            if isinstance(result, LinkList):
                body_bytes = _links_adapter.dump_json(result.links)
            elif isinstance(result, SingleLink):
                body_bytes = result.link.model_dump_json().encode()
            else:
                raise RenderError(
                    f"Unsupported data type for JSON rendering: {type(result).__name__}"
                )
        except PydanticSerializationError as exc:
            raise RenderError(str(exc)) from exc
        return Response(content=body_bytes, media_type=JSON)

    def render_edit_form(self, link: LinkRead) -> Response:
        return Response(
            content=self._render_template("edit.html", link=link), media_type=HTML
        )

    def _render_template(self, name: str, **context) -> str:
        try:
            return self.environment.get_template(name).render(**context)
        except TemplateError as exc:
            raise RenderError(str(exc)) from exc
