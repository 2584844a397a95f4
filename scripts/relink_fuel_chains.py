"""
Reparation de la chaine des pleins / Fuel chain repair.

Recalcule next_fueling_odometer et le rendement de chaque vehicule actif,
comme l'endpoint POST /api/expenses/calculate-mileage/{vehicle_id}.
Recomputes next_fueling_odometer and mileage for every active vehicle,
like the POST /api/expenses/calculate-mileage/{vehicle_id} endpoint.

Usage:
    python -m scripts.relink_fuel_chains
    DATABASE_URL=postgresql+asyncpg://... python -m scripts.relink_fuel_chains
"""

import asyncio
import logging

from sqlalchemy import select

from motormate.database import async_session, init_db
from motormate.models.vehicle import Vehicle
from motormate.services.mileage_linker import MileageLinker

logger = logging.getLogger("motormate.relink")


async def relink_all() -> int:
    """Recalculer toutes les chaines / Recompute every chain. Returns the number of links written."""
    await init_db()
    total = 0
    async with async_session() as session:
        result = await session.execute(select(Vehicle.id).where(Vehicle.is_active == True).order_by(Vehicle.id))
        vehicle_ids = [row[0] for row in result.all()]
        logger.info("Relinking fuel chains for %d vehicles", len(vehicle_ids))

        linker = MileageLinker(session)
        for vehicle_id in vehicle_ids:
            updates = await linker.relink_vehicle(vehicle_id)
            await session.commit()
            total += len(updates)
            logger.info("Vehicle %s: %d links", vehicle_id, len(updates))
    return total


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    total = asyncio.run(relink_all())
    logger.info("Done: %d links written", total)


if __name__ == "__main__":
    main()
