import asyncio
import logging
from collections.abc import Sequence

from app.rental.adapters.backend import AbstractRentalBackend
from app.rental.domain import models

logger = logging.getLogger(__name__)


async def allocate_inventory(
    store_id: int,
    cart: Sequence[models.CartLine],
    backend: AbstractRentalBackend,
) -> list[int]:
    """Load a fresh availability snapshot for ``cart`` and allocate from it.

    Open rentals of the store and the inventory of every distinct film are
    fetched concurrently; nothing is cached between calls.
    """
    film_ids = list(dict.fromkeys(line.film_id for line in cart))
    open_rentals, inventories = await asyncio.gather(
        backend.list_open_rentals(store_id),
        asyncio.gather(*(backend.list_film_inventories(film_id) for film_id in film_ids)),
    )
    inventory_by_film = {
        film_id: [
            models.InventoryUnit(inventory_id=i.inventory_id, film_id=i.film_id, store_id=i.store_id)
            for i in units
        ]
        for film_id, units in zip(film_ids, inventories)
    }
    inventory_ids = models.allocate(
        store_id,
        cart,
        [models.OpenRental(inventory_id=r.inventory_id) for r in open_rentals],
        inventory_by_film,
    )
    logger.debug("Allocated inventory %s for store %s", inventory_ids, store_id)
    return inventory_ids
