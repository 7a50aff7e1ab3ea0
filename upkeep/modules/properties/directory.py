"""Read-only property lookups for the planners."""

import logging

from upkeep.core import db_client
from upkeep.core.logging import span
from upkeep.domain.property import Property


logger = logging.getLogger(__name__)


async def get_property(*, property_id: str) -> Property:
    """Load a property with its normalized unit list.

    Raises:
        db_client.RecordNotFoundError: If the property does not exist
    """
    with span("property_directory.get_property"):
        record = await db_client.get_record(collection="properties", record_id=property_id)
        property_ = Property.model_validate(record)
        logger.debug("Loaded property %s (%s, %d units)", property_id, property_.flow_type, property_.unit_count)
        return property_


async def create_property(property_: Property) -> Property:
    """Store a property record; the store assigns the ID."""
    with span("property_directory.create_property"):
        data = property_.model_dump(mode="json", exclude={"id"})
        record = await db_client.create_record(collection="properties", data=data)
        logger.info("Created property %s", record["id"])
        return Property.model_validate(record)
