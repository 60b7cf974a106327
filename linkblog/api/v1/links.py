import logging
import re
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from linkblog.api.deps import (
    get_metadata_service,
    get_renderer,
    get_repository,
    is_fragment_request,
)
from linkblog.errors import InvalidIdentifier, LinkNotFound, MissingIdentifier
from linkblog.models import Link
from linkblog.repositories import LinkRepository
from linkblog.schemas import LinkMetadata, LinkPayload, LinkRead, parse_form
from linkblog.services.metadata import MetadataService
from linkblog.services.renderer import LinkList, LinkRenderer, SingleLink

logger = logging.getLogger("linkblog.links")

router = APIRouter(prefix="/links", tags=["links"])

Repository = Annotated[LinkRepository, Depends(get_repository)]
Metadata = Annotated[MetadataService, Depends(get_metadata_service)]
Renderer = Annotated[LinkRenderer, Depends(get_renderer)]
Fragment = Annotated[bool, Depends(is_fragment_request)]
LinkIdParam = Annotated[Optional[str], Query(alias="id")]
ViewParam = Annotated[Optional[str], Query()]

_LINK_ID = re.compile(r"[+-]?[0-9]{1,19}")
_MAX_LINK_ID = 2**63 - 1


def parse_link_id(raw: Optional[str]) -> int:
    if raw is None or not _LINK_ID.fullmatch(raw):
        raise InvalidIdentifier()
    try:
        link_id = int(raw)
    except ValueError as exc:
        raise InvalidIdentifier() from exc
    # Store ids are signed 64-bit integers.
    if not -_MAX_LINK_ID - 1 <= link_id <= _MAX_LINK_ID:
        raise InvalidIdentifier()
    return link_id


async def fetch_link(repository: LinkRepository, link_id: int) -> Link:
    link = await repository.get(link_id)
    if link is None:
        raise LinkNotFound()
    return link


@router.get("")
async def read_links(
    repository: Repository,
    renderer: Renderer,
    fragment: Fragment,
    link_id: LinkIdParam = None,
    view: ViewParam = None,
) -> Response:
    """Get one link when ``id`` is given, otherwise all links, newest first."""
    if link_id:
        link = await fetch_link(repository, parse_link_id(link_id))
        return renderer.render(SingleLink(LinkRead.model_validate(link)), fragment, view)

    links = await repository.list_all()
    return renderer.render(
        LinkList([LinkRead.model_validate(link) for link in links]), fragment, view
    )


@router.post("")
async def create_link(
    request: Request,
    repository: Repository,
    metadata_service: Metadata,
    renderer: Renderer,
    fragment: Fragment,
    view: ViewParam = None,
) -> Response:
    """Create a link from a form-encoded ``url`` and ``commentary``."""
    payload = LinkPayload.from_form(parse_form(await request.body()))
    metadata = await metadata_service.extract(payload.url)

    link_id = await repository.create(
        url=payload.url,
        commentary=payload.commentary,
        title=metadata.title,
        image_url=metadata.image_url,
    )
    logger.info("Created link %s for %s", link_id, payload.url)

    link = await fetch_link(repository, link_id)
    return renderer.render(SingleLink(LinkRead.model_validate(link)), fragment, view)


@router.put("")
async def update_link(
    request: Request,
    repository: Repository,
    metadata_service: Metadata,
    renderer: Renderer,
    fragment: Fragment,
    link_id: LinkIdParam = None,
    view: ViewParam = None,
) -> Response:
    """Update a link, or return its edit form when the body is empty.

    Metadata is fetched again only when the URL changes.
    """
    form = parse_form(await request.body())
    if not form:
        link = await fetch_link(repository, parse_link_id(link_id))
        return renderer.render_edit_form(LinkRead.model_validate(link))

    current_id = parse_link_id(link_id)
    current = await fetch_link(repository, current_id)
    payload = LinkPayload.from_form(form)

    if payload.url != current.url:
        metadata = await metadata_service.extract(payload.url)
    else:
        logger.debug("URL of link %s unchanged, keeping its metadata", current_id)
        metadata = LinkMetadata(title=current.title, image_url=current.image_url)

    await repository.update(
        current_id,
        url=payload.url,
        commentary=payload.commentary,
        title=metadata.title,
        image_url=metadata.image_url,
    )
    logger.info("Updated link %s", current_id)

    link = await fetch_link(repository, current_id)
    return renderer.render(SingleLink(LinkRead.model_validate(link)), fragment, view)


@router.delete("")
async def delete_link(repository: Repository, link_id: LinkIdParam = None) -> Response:
    """Delete a link. Deleting an unknown id still succeeds."""
    if not link_id:
        raise MissingIdentifier()
    target = parse_link_id(link_id)
    await repository.delete(target)
    logger.info("Deleted link %s", target)
    return Response(content="", media_type="text/html")
