from collections.abc import AsyncIterator
from typing import Annotated, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from linkblog.repositories import LinkRepository
from linkblog.services.metadata import MetadataService
from linkblog.services.renderer import LinkRenderer


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def get_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> LinkRepository:
    return LinkRepository(session)


def get_metadata_service(request: Request) -> MetadataService:
    return request.app.state.metadata_service


def get_renderer(request: Request) -> LinkRenderer:
    return request.app.state.renderer


def is_fragment_request(
    hx_request: Optional[str] = Header(default=None, alias="HX-Request"),
) -> bool:
    """True when the caller asked for an HTML fragment (htmx sets ``HX-Request``)."""
    return hx_request == "true"
