"""
Rating ledger: the only writer of a shop's rating_sum / rating_count.

Every change is a signed delta applied with a single atomic UPDATE, so
concurrent adjustments compose in any order without lost updates. The
average is derived on read and never stored.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import ConflictError, NotFoundError
from models.shop import Shop, derive_average

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class LedgerDelta:
    sum: int
    count: int

    @classmethod
    def review_created(cls, rating: int) -> "LedgerDelta":
        return cls(sum=rating, count=1)

    @classmethod
    def review_removed(cls, rating: int) -> "LedgerDelta":
        return cls(sum=-rating, count=-1)

    def __add__(self, other: "LedgerDelta") -> "LedgerDelta":
        return LedgerDelta(sum=self.sum + other.sum, count=self.count + other.count)


class RatingLedger:

    def __init__(
        self,
        max_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.max_retries = max_retries if max_retries is not None else settings.LEDGER_MAX_RETRIES
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.LEDGER_RETRY_BACKOFF_SECONDS
        )
        self._sleep = sleep

    def adjust(self, db: Session, shop_id: str, delta: LedgerDelta) -> float:
        """Apply delta to the shop's ledger inside the caller's transaction.

        Returns the average rating after the adjustment.
        """
        result = db.execute(
            update(Shop)
            .where(Shop.id == shop_id)
            .values(
                rating_sum=Shop.rating_sum + delta.sum,
                rating_count=Shop.rating_count + delta.count
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError("Shop", shop_id)

        rating_sum, rating_count = db.execute(
            select(Shop.rating_sum, Shop.rating_count).where(Shop.id == shop_id)
        ).one()
        return derive_average(rating_sum, rating_count)

    def run(self, db: Session, unit_of_work: Callable[[], T], description: str = "ledger adjustment") -> T:
        """
        Run unit_of_work and commit it as one transaction.

        unit_of_work must perform the record mutation and its adjust() call
        together. Transient storage failures roll the whole unit back and
        retry it with exponential backoff; once retries are exhausted the
        mutation is abandoned and ConflictError is raised, so no record
        change is ever committed without its ledger delta.
        """
        last_error = None
        for attempt in range(1, self.max_retries + 1):
            try:
                result = unit_of_work()
                db.commit()
                return result
            except OperationalError as e:
                db.rollback()
                last_error = e
                logger.warning(
                    f"Transient failure during {description} "
                    f"(attempt {attempt}/{self.max_retries}): {str(e)}"
                )
                if attempt < self.max_retries:
                    self._sleep(min(
                        self.backoff_seconds * (2 ** (attempt - 1)),
                        settings.LEDGER_RETRY_MAX_BACKOFF_SECONDS
                    ))
            except Exception:
                db.rollback()
                raise

        logger.error(f"Giving up on {description} after {self.max_retries} attempts: {str(last_error)}")
        raise ConflictError(
            f"Could not apply {description}; please retry",
            details={"attempts": self.max_retries}
        )

