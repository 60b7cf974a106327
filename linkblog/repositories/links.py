from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from linkblog.errors import StoreError
from linkblog.models import Link


class LinkRepository:
    """Parameterized queries over the ``links`` table.

    Every database failure is rolled back and re-raised as ``StoreError``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        url: str,
        commentary: str,
        title: Optional[str],
        image_url: Optional[str],
    ) -> int:
        link = Link(url=url, commentary=commentary, title=title, image_url=image_url)
        try:
            self.session.add(link)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StoreError(str(exc)) from exc
        return link.id

    async def get(self, link_id: int) -> Optional[Link]:
        try:
            result = await self.session.execute(
                select(Link)
                .where(Link.id == link_id)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StoreError(str(exc)) from exc
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Link]:
        try:
            result = await self.session.execute(select(Link).order_by(Link.id.desc()))
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StoreError(str(exc)) from exc
        return list(result.scalars().all())

    async def update(
        self,
        link_id: int,
        url: str,
        commentary: str,
        title: Optional[str],
        image_url: Optional[str],
    ) -> None:
        stmt = (
            update(Link)
            .where(Link.id == link_id)
            .values(url=url, commentary=commentary, title=title, image_url=image_url)
            .execution_options(synchronize_session="fetch")
        )
        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StoreError(str(exc)) from exc

    async def delete(self, link_id: int) -> None:
        try:
            await self.session.execute(delete(Link).where(Link.id == link_id))
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StoreError(str(exc)) from exc
