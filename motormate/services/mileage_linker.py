"""
Chainage des pleins / Fuel fill-up chaining.

Chaque depense carburant garde dans next_fueling_odometer le compteur du plein
suivant du meme vehicule. Le chainage automatique ne remplit qu'un pointeur vide
(UPDATE conditionnel): le premier ecrit gagne.
Each fuel expense keeps the odometer of the vehicle's following fill-up in
next_fueling_odometer. Automatic chaining only fills an empty pointer
(conditional UPDATE): first write wins.

Les etapes automatiques sont secondaires: un echec est journalise puis ignore,
l'enregistrement principal est deja valide.
Automatic steps are secondary: a failure is logged then ignored, the primary
record is already committed.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from motormate.models.expense import Expense, ExpenseType
from motormate.schemas.expense import MileageUpdate
from motormate.services.efficiency_calculator import EfficiencyCalculatorService

logger = logging.getLogger(__name__)


def _interval_mileage(distance: int, fuel_added: float | None) -> float | None:
    if distance <= 0:
        return None
    mileage = EfficiencyCalculatorService.safe_divide(distance, fuel_added)
    return round(mileage, 2) if mileage else None


class MileageLinker:
    """Maintien de la chaine des pleins / Fuel chain maintenance."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _fuel_history(vehicle_id: int):
        return select(Expense).where(
            Expense.vehicle_id == vehicle_id,
            Expense.expense_type == ExpenseType.FUEL,
            Expense.is_active == True,
        )

    async def link_predecessor(self, expense: Expense) -> Expense | None:
        """Chainer le plein precedent vers ce plein / Link the previous fill-up to this one.

        Precedent = compteur le plus haut strictement inferieur, puis date la plus recente.
        Predecessor = highest odometer strictly below, then most recent date.
        Returns the predecessor when its empty pointer was claimed, else None.
        """
        odometer = expense.odometer_reading
        if odometer is None:
            return None

        result = await self.db.execute(
            self._fuel_history(expense.vehicle_id)
            .where(Expense.id != expense.id, Expense.odometer_reading < odometer)
            .order_by(Expense.odometer_reading.desc(), Expense.date.desc(), Expense.id.desc())
            .limit(1)
        )
        predecessor = result.scalar_one_or_none()
        if predecessor is None:
            return None

        claimed = await self.db.execute(
            update(Expense)
            .where(Expense.id == predecessor.id, Expense.next_fueling_odometer.is_(None))
            .values(
                next_fueling_odometer=odometer,
                mileage=_interval_mileage(odometer - predecessor.odometer_reading, expense.fuel_added),
            )
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount == 0:
            return None

        await self.db.refresh(predecessor)
        logger.debug("Expense %s linked to next fill-up at %s", predecessor.id, odometer)
        return predecessor

    async def retarget_successor(self, expense: Expense, old_odometer: int) -> Expense | None:
        """Rediriger le pointeur qui visait l'ancien compteur / Retarget the pointer aimed at the old odometer."""
        new_odometer = expense.odometer_reading
        if new_odometer is None or old_odometer == new_odometer:
            return None

        result = await self.db.execute(
            self._fuel_history(expense.vehicle_id)
            .where(Expense.id != expense.id, Expense.next_fueling_odometer == old_odometer)
            .order_by(Expense.odometer_reading.desc(), Expense.id.desc())
            .limit(1)
        )
        former = result.scalar_one_or_none()
        if former is None:
            return None

        distance = new_odometer - (former.odometer_reading or 0)
        await self.db.execute(
            update(Expense)
            .where(Expense.id == former.id, Expense.next_fueling_odometer == old_odometer)
            .values(next_fueling_odometer=new_odometer, mileage=_interval_mileage(distance, expense.fuel_added))
            .execution_options(synchronize_session=False)
        )
        await self.db.refresh(former)
        logger.debug("Expense %s retargeted from %s to %s", former.id, old_odometer, new_odometer)
        return former

    async def pointer_mileage(self, expense: Expense) -> float | None:
        """Rendement d'apres le pointeur du plein / Mileage from the fill-up's own pointer.

        Carburant du plein situe au compteur pointe, sinon celui du plein lui-meme.
        Fuel of the fill-up at the pointed odometer, else the fill-up's own fuel.
        """
        pointer = expense.next_fueling_odometer
        if pointer is None or expense.odometer_reading is None:
            return None

        result = await self.db.execute(
            self._fuel_history(expense.vehicle_id)
            .where(Expense.id != expense.id, Expense.odometer_reading == pointer)
            .order_by(Expense.date, Expense.id)
            .limit(1)
        )
        successor = result.scalar_one_or_none()
        fuel = successor.fuel_added if successor is not None and successor.fuel_added else expense.fuel_added
        return _interval_mileage(pointer - expense.odometer_reading, fuel)

    async def refresh_predecessor_mileage(self, expense: Expense) -> Expense | None:
        """Recalculer le rendement du plein qui pointe ici / Recompute the mileage of the fill-up pointing here."""
        if expense.odometer_reading is None:
            return None

        result = await self.db.execute(
            self._fuel_history(expense.vehicle_id)
            .where(Expense.id != expense.id, Expense.next_fueling_odometer == expense.odometer_reading)
            .order_by(Expense.odometer_reading.desc(), Expense.id.desc())
            .limit(1)
        )
        predecessor = result.scalar_one_or_none()
        if predecessor is None:
            return None

        distance = expense.odometer_reading - (predecessor.odometer_reading or 0)
        predecessor.mileage = _interval_mileage(distance, expense.fuel_added)
        await self.db.flush()
        logger.debug("Expense %s mileage refreshed to %s", predecessor.id, predecessor.mileage)
        return predecessor

    async def _best_effort(self, step: str, expense: Expense, coro) -> None:
        try:
            await coro
            await self.db.commit()
        except Exception:
            logger.warning("Fuel chain step '%s' failed for expense %s", step, expense.id, exc_info=True)
            await self.db.rollback()
            await self.db.refresh(expense)

    async def on_create(self, expense: Expense) -> None:
        """Apres creation d'un plein / After a fill-up is created."""
        if expense.expense_type != ExpenseType.FUEL or expense.odometer_reading is None:
            return
        await self._best_effort("link predecessor", expense, self.link_predecessor(expense))

    async def on_odometer_change(self, expense: Expense, old_odometer: int | None) -> None:
        """Apres modification du compteur d'un plein / After a fill-up's odometer changed."""
        if expense.expense_type != ExpenseType.FUEL or expense.odometer_reading is None:
            return
        await self._best_effort("link predecessor", expense, self.link_predecessor(expense))
        if old_odometer is not None:
            await self._best_effort("retarget successor", expense, self.retarget_successor(expense, old_odometer))

    async def on_fuel_change(self, expense: Expense) -> None:
        """Apres modification du carburant d'un plein / After a fill-up's fuel_added changed."""
        if expense.expense_type != ExpenseType.FUEL:
            return
        await self._best_effort("refresh predecessor", expense, self.refresh_predecessor_mileage(expense))

    async def relink_vehicle(self, vehicle_id: int) -> list[MileageUpdate]:
        """Recalcul complet de la chaine (ecrase les pointeurs) / Full chain recompute (overwrites pointers).

        Les pleins sans successeur valide perdent pointeur et rendement.
        Fill-ups without a valid successor lose their pointer and mileage.
        """
        result = await self.db.execute(
            self._fuel_history(vehicle_id).order_by(Expense.odometer_reading, Expense.date, Expense.id)
        )
        history = result.scalars().all()
        for expense in history:
            expense.next_fueling_odometer = None
            expense.mileage = None

        updates = []
        for link in EfficiencyCalculatorService.chain_links(history):
            expense = link.expense
            expense.next_fueling_odometer = link.next_odometer
            expense.mileage = round(link.mileage, 2)
            updates.append(MileageUpdate(
                expense_id=expense.id,
                date=expense.date,
                odometer_start=expense.odometer_reading,
                odometer_end=link.next_odometer,
                distance_traveled=link.distance,
                fuel_used=round(link.fuel, 2),
                mileage=round(link.mileage, 2),
            ))
        await self.db.flush()
        return updates
