"""ToggleLike / ToggleDislike: react to someone else's review.

Toggling the reaction a user already holds retracts it; toggling the opposite
one switches sides in the same update. Reactions never touch the establishment
aggregate.
"""

from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from dining.domain import dining
from dining.projections.review_detail import ReviewDetail
from dining.review.review import ReactionState, Review
from dining.utils.logging import get_logger

logger = get_logger(__name__)


@dining.command(part_of="Review")
class ToggleLike:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)


@dining.command(part_of="Review")
class ToggleDislike:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)


@dining.command_handler(part_of=Review)
class ReactionHandler:
    @handle(ToggleLike)
    def toggle_like(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.find_for_update(command.review_id)
        state = review.toggle_like(command.user_id)
        repo.add(review)

        logger.info("Review like toggled", review_id=str(review.id), user_id=command.user_id, state=state.value)
        return ReviewDetail.of(review)

    @handle(ToggleDislike)
    def toggle_dislike(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.find_for_update(command.review_id)
        state = review.toggle_dislike(command.user_id)
        repo.add(review)

        logger.info("Review dislike toggled", review_id=str(review.id), user_id=command.user_id, state=state.value)
        return ReviewDetail.of(review)


def reaction_state(review_id: str, user_id: str) -> ReactionState:
    return current_domain.repository_for(Review).find(review_id).reaction_of(user_id)
