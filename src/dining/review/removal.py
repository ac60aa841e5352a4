"""DeleteReview: remove a review, by its author or an administrator.

Reactions go with the review. The establishment aggregate is recomputed over
the remaining reviews in the same unit of work.
"""

from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from dining.domain import dining
from dining.errors import Forbidden
from dining.establishment.establishment import Establishment
from dining.review.aggregation import recompute_rating
from dining.review.review import Review
from dining.utils.logging import get_logger

logger = get_logger(__name__)


@dining.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    requester_is_admin = Boolean(default=False)


@dining.command_handler(part_of=Review)
class DeleteReviewHandler:
    @handle(DeleteReview)
    def delete_review(self, command):
        establishments = current_domain.repository_for(Establishment)
        reviews = current_domain.repository_for(Review)

        establishment = establishments.lock(reviews.establishment_of(command.review_id))
        review = reviews.find_for_update(command.review_id)

        if not (command.requester_is_admin or review.is_authored_by(command.requester_id)):
            raise Forbidden(
                "Only the review author or an administrator can delete this review",
                review_id=str(review.id),
            )
        by_admin = not review.is_authored_by(command.requester_id)

        review.withdraw_reactions()
        reviews.add(review)
        reviews._dao.delete(review)

        recompute_rating(establishment, changed=review, removed=True)

        logger.info(
            "Review deleted",
            review_id=str(command.review_id),
            establishment_id=str(establishment.id),
            by_admin=by_admin,
        )
