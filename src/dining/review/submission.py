"""CreateReview: write a new review for an approved establishment.

One review per author per establishment. The check below gives a clear error
in the common case; the unique index catches the concurrent one.
"""

from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from dining.domain import dining
from dining.errors import DuplicateReview, MenuItemNotInEstablishment
from dining.establishment.establishment import Establishment
from dining.projections.review_detail import ReviewDetail
from dining.review.aggregation import recompute_rating
from dining.review.review import Review
from dining.utils.logging import get_logger

logger = get_logger(__name__)


@dining.command(part_of="Review")
class CreateReview:
    author_id = Identifier(required=True)
    establishment_id = Identifier(required=True)
    rating = Integer(required=True)
    comment = Text(required=True)
    menu_item_id = Identifier()


@dining.command_handler(part_of=Review)
class CreateReviewHandler:
    @handle(CreateReview)
    def create_review(self, command):
        establishments = current_domain.repository_for(Establishment)
        reviews = current_domain.repository_for(Review)

        establishment = establishments.lock_for_review_write(command.establishment_id)

        if command.menu_item_id:
            owner_id = establishments.menu_item_establishment(command.menu_item_id)
            if owner_id != str(establishment.id):
                raise MenuItemNotInEstablishment(
                    menu_item_id=command.menu_item_id,
                    establishment_id=str(establishment.id),
                )

        if reviews.find_by_author(command.author_id, establishment.id) is not None:
            raise DuplicateReview(author_id=command.author_id, establishment_id=str(establishment.id))

        review = Review.write(
            author_id=command.author_id,
            establishment_id=establishment.id,
            rating=command.rating,
            comment=command.comment,
            menu_item_id=command.menu_item_id,
        )
        reviews.add(review)

        recompute_rating(establishment, changed=review)

        logger.info(
            "Review created",
            review_id=str(review.id),
            establishment_id=str(establishment.id),
            rating=review.rating,
        )
        return ReviewDetail.of(review)
