"""EditReview: change the rating, comment or menu item of one's own review.

Only fields present in the command are applied; ``clear_menu_item`` detaches
the review from its menu item. The establishment aggregate is recomputed only
when the rating actually changes.
"""

from protean.fields import Boolean, Identifier, Integer, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from dining.domain import dining
from dining.errors import Forbidden, MenuItemNotInEstablishment
from dining.establishment.establishment import Establishment
from dining.projections.review_detail import ReviewDetail
from dining.review.aggregation import recompute_rating
from dining.review.review import Review
from dining.utils.logging import get_logger

logger = get_logger(__name__)


@dining.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    author_id = Identifier(required=True)  # Must match the original author
    rating = Integer()
    comment = Text()
    menu_item_id = Identifier()
    clear_menu_item = Boolean(default=False)


@dining.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        establishments = current_domain.repository_for(Establishment)
        reviews = current_domain.repository_for(Review)

        # Establishment first, then the review
        establishment = establishments.lock(reviews.establishment_of(command.review_id))
        review = reviews.find_for_update(command.review_id)
        if not review.is_authored_by(command.author_id):
            raise Forbidden("Only the review author can edit this review", review_id=str(review.id))

        patch = {}
        if command.rating is not None:
            patch["rating"] = command.rating
        if command.comment is not None:
            patch["comment"] = command.comment
        if command.clear_menu_item:
            patch["menu_item_id"] = None
        elif command.menu_item_id:
            owner_id = establishments.menu_item_establishment(command.menu_item_id)
            if owner_id != str(review.establishment_id):
                raise MenuItemNotInEstablishment(
                    menu_item_id=command.menu_item_id,
                    establishment_id=str(review.establishment_id),
                )
            patch["menu_item_id"] = command.menu_item_id

        rating_changed = review.revise(**patch)
        reviews.add(review)

        if rating_changed:
            recompute_rating(establishment, changed=review)

        logger.info(
            "Review edited",
            review_id=str(review.id),
            fields=sorted(patch),
            rating_changed=rating_changed,
        )
        return ReviewDetail.of(review)
