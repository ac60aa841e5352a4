"""Repository for the Establishment aggregate.

Besides plain CRUD it provides the two narrow lookups the review engine needs
from the catalog: a locked, approved establishment to write reviews against,
and the owning establishment of a menu item.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from sqlalchemy import select

from dining.domain import dining
from dining.errors import EstablishmentNotApproved, EstablishmentNotFound, MenuItemNotFound
from dining.establishment.establishment import Establishment, MenuItem
from dining.utils.db import session_for, table_for


@dining.repository(part_of=Establishment)
class EstablishmentRepository:
    def find(self, establishment_id: str) -> Establishment:
        try:
            return self.get(establishment_id)
        except ObjectNotFoundError:
            raise EstablishmentNotFound(establishment_id=establishment_id)

    def lock(self, establishment_id: str) -> Establishment:
        """Load the establishment holding its row lock until the unit of work ends.

        All review writes of one establishment serialize on this lock.
        """
        table = table_for(self._dao)
        with session_for(self._dao) as session:
            session.execute(select(table.c.id).where(table.c.id == str(establishment_id)).with_for_update())
        return self.find(establishment_id)

    def lock_for_review_write(self, establishment_id: str) -> Establishment:
        """Lock an establishment that new reviews may be written against."""
        establishment = self.lock(establishment_id)
        if not establishment.is_approved:
            raise EstablishmentNotApproved(establishment_id=establishment_id)
        return establishment

    def menu_item_establishment(self, menu_item_id: str) -> str:
        """Return the id of the establishment that offers ``menu_item_id``."""
        try:
            item = current_domain.repository_for(MenuItem).get(menu_item_id)
        except ObjectNotFoundError:
            raise MenuItemNotFound(menu_item_id=menu_item_id)
        return str(item.establishment_id)

    def ranking_candidates(self, category_id: str | None = None) -> list:
        """Approved establishments with at least one review, ordered by id."""
        table = table_for(self._dao)
        stmt = select(
            table.c.id,
            table.c.name,
            table.c.category_id,
            table.c.mean_rating,
            table.c.review_count,
        ).where(table.c.is_approved.is_(True), table.c.review_count > 0)
        if category_id:
            stmt = stmt.where(table.c.category_id == category_id)

        with session_for(self._dao) as session:
            return list(session.execute(stmt.order_by(table.c.id)))

    def all_ids(self) -> list[str]:
        table = table_for(self._dao)
        with session_for(self._dao) as session:
            return list(session.scalars(select(table.c.id).order_by(table.c.id)))
