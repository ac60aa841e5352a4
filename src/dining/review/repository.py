"""Repository for the Review aggregate."""

from protean.exceptions import ObjectNotFoundError
from sqlalchemy import func, select

from dining.domain import dining
from dining.errors import ReviewNotFound
from dining.review.review import Review
from dining.utils.db import session_for, table_for

SORTABLE_FIELDS = ("created_at", "rating", "likes_count")


@dining.repository(part_of=Review)
class ReviewRepository:
    def find(self, review_id: str) -> Review:
        try:
            return self.get(review_id)
        except ObjectNotFoundError:
            raise ReviewNotFound(review_id=review_id)

    def establishment_of(self, review_id: str) -> str:
        """The establishment a review belongs to, without loading the aggregate."""
        table = table_for(self._dao)
        with session_for(self._dao) as session:
            establishment_id = session.scalar(select(table.c.establishment_id).where(table.c.id == str(review_id)))
        if establishment_id is None:
            raise ReviewNotFound(review_id=review_id)
        return establishment_id

    def find_for_update(self, review_id: str) -> Review:
        """Load the review holding its row lock until the unit of work ends."""
        table = table_for(self._dao)
        with session_for(self._dao) as session:
            session.execute(select(table.c.id).where(table.c.id == str(review_id)).with_for_update())
        return self.find(review_id)

    def find_by_author(self, author_id: str, establishment_id: str) -> Review | None:
        return self._dao.query.filter(
            author_id=str(author_id),
            establishment_id=str(establishment_id),
        ).all().first

    def ratings_for(self, establishment_id: str, excluding: str | None = None) -> list[int]:
        """Ratings of the stored reviews of an establishment, optionally minus one."""
        table = table_for(self._dao)
        stmt = select(table.c.rating).where(table.c.establishment_id == str(establishment_id))
        if excluding is not None:
            stmt = stmt.where(table.c.id != str(excluding))

        with session_for(self._dao) as session:
            return list(session.scalars(stmt))

    def page_for_establishment(
        self,
        establishment_id: str,
        offset: int,
        limit: int,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> tuple[list[Review], int]:
        table = table_for(self._dao)
        column = table.c[sort_by]
        ordering = column.asc() if sort_order == "asc" else column.desc()
        where = table.c.establishment_id == str(establishment_id)

        with session_for(self._dao) as session:
            total = session.scalar(select(func.count()).select_from(table).where(where))
            ids = list(
                session.scalars(
                    select(table.c.id).where(where).order_by(ordering, table.c.id).offset(offset).limit(limit)
                )
            )

        return [self.find(review_id) for review_id in ids], total or 0

    def reaction_totals(self, establishment_ids: list[str]) -> dict[str, tuple[int, int, object]]:
        """Map establishment id to (likes, dislikes, latest review created_at)."""
        if not establishment_ids:
            return {}

        table = table_for(self._dao)
        stmt = (
            select(
                table.c.establishment_id,
                func.coalesce(func.sum(table.c.likes_count), 0),
                func.coalesce(func.sum(table.c.dislikes_count), 0),
                func.max(table.c.created_at),
            )
            .where(table.c.establishment_id.in_([str(i) for i in establishment_ids]))
            .group_by(table.c.establishment_id)
        )

        with session_for(self._dao) as session:
            rows = session.execute(stmt).all()

        return {
            establishment_id: (int(likes), int(dislikes), latest) for establishment_id, likes, dislikes, latest in rows
        }
