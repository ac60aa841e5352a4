import pytest
from protean.utils.globals import current_domain

from dining.establishment.establishment import Establishment
from dining.establishment.registration import AddMenuItem, ApproveEstablishment, RegisterEstablishment


@pytest.fixture(scope="session")
def _dining_domain():
    """Initialize the dining domain once per session."""
    from dining.domain import dining

    dining.init()
    return dining


@pytest.fixture(scope="session", autouse=True)
def setup_db(_dining_domain):
    from dining.utils.db import drop_db, setup_db

    # The test database is a file; start from a clean schema
    drop_db(_dining_domain)
    setup_db(_dining_domain)

    yield

    drop_db(_dining_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_dining_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _dining_domain.domain_context()
    ctx.push()

    yield

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


@pytest.fixture
def make_establishment():
    def make(name="Trattoria Roma", category_id="italian", approved=True):
        establishment_id = current_domain.process(
            RegisterEstablishment(name=name, category_id=category_id), asynchronous=False
        )
        if approved:
            current_domain.process(ApproveEstablishment(establishment_id=establishment_id), asynchronous=False)
        return establishment_id

    return make


@pytest.fixture
def make_menu_item():
    def make(establishment_id, name="Cacio e pepe"):
        return current_domain.process(AddMenuItem(establishment_id=establishment_id, name=name), asynchronous=False)

    return make


@pytest.fixture
def establishment_state():
    """Read (mean_rating, review_count) as committed."""

    def read(establishment_id):
        establishment = current_domain.repository_for(Establishment).get(establishment_id)
        return establishment.mean_rating, establishment.review_count

    return read


@pytest.fixture
def establishment_id(make_establishment):
    return make_establishment()
