"""Shared BDD fixtures and step definitions for the Dining domain."""

import pytest
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then

from dining.errors import DiningError
from dining.establishment.establishment import Establishment
from dining.review.reactions import reaction_state
from dining.review.submission import CreateReview


@pytest.fixture()
def error():
    """Container for a captured domain error."""
    return {"exc": None}


def write_review(establishment_id, author_id, rating, comment="Solid food, friendly staff, would return."):
    return current_domain.process(
        CreateReview(author_id=author_id, establishment_id=establishment_id, rating=rating, comment=comment),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('an approved establishment "{name}"'), target_fixture="establishment_id")
def approved_establishment(make_establishment, name):
    return make_establishment(name=name)


@given(parsers.cfparse('a pending establishment "{name}"'), target_fixture="establishment_id")
def pending_establishment(make_establishment, name):
    return make_establishment(name=name, approved=False)


@given(parsers.cfparse('a review by "{author_id}" rated {rating:d}'), target_fixture="review")
def existing_review(establishment_id, author_id, rating):
    return write_review(establishment_id, author_id, rating)


@given(parsers.cfparse("reviews rated {ratings}"))
def existing_reviews(establishment_id, ratings):
    for n, rating in enumerate(ratings.split(",")):
        write_review(establishment_id, f"earlier-diner-{n}", int(rating))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the establishment has a mean rating of {mean:g} over {count:d} reviews"))
def establishment_aggregate(establishment_id, mean, count):
    establishment = current_domain.repository_for(Establishment).get(establishment_id)
    assert establishment.mean_rating == mean
    assert establishment.review_count == count


@then(parsers.cfparse('the request is rejected with "{code}"'))
def request_rejected(error, code):
    assert isinstance(error["exc"], DiningError)
    assert error["exc"].code == code


@then(parsers.cfparse('"{user_id}" holds no reaction'))
def no_reaction(review, user_id):
    assert reaction_state(review.id, user_id).value == "none"
