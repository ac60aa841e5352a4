"""Catalog commands: register and approve establishments, add menu items.

Reviews can only be written against approved establishments.
"""

from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from dining.domain import dining
from dining.establishment.establishment import Establishment, MenuItem
from dining.utils.logging import get_logger

logger = get_logger(__name__)


@dining.command(part_of="Establishment")
class RegisterEstablishment:
    name = String(required=True, max_length=200)
    category_id = Identifier()


@dining.command(part_of="Establishment")
class ApproveEstablishment:
    establishment_id = Identifier(required=True)


@dining.command(part_of="Establishment")
class AddMenuItem:
    establishment_id = Identifier(required=True)
    name = String(required=True, max_length=200)


@dining.command_handler(part_of=Establishment)
class EstablishmentRegistrationHandler:
    @handle(RegisterEstablishment)
    def register_establishment(self, command):
        establishment = Establishment.register(name=command.name, category_id=command.category_id)
        current_domain.repository_for(Establishment).add(establishment)

        logger.info("Establishment registered", establishment_id=str(establishment.id), name=establishment.name)
        return str(establishment.id)

    @handle(ApproveEstablishment)
    def approve_establishment(self, command):
        repo = current_domain.repository_for(Establishment)
        establishment = repo.lock(command.establishment_id)
        establishment.approve()
        repo.add(establishment)

        logger.info("Establishment approved", establishment_id=str(establishment.id))

    @handle(AddMenuItem)
    def add_menu_item(self, command):
        establishment = current_domain.repository_for(Establishment).find(command.establishment_id)
        item = MenuItem.offer(establishment.id, command.name)
        current_domain.repository_for(MenuItem).add(item)

        logger.info("Menu item added", establishment_id=str(establishment.id), menu_item_id=str(item.id))
        return str(item.id)
