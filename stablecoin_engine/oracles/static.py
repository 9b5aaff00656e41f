"""In-memory price feeds with settable answers."""
import logging

from ..config import StaticFeedConfig
from ..constants import DEFAULT_FEED_DECIMALS
from ..errors import PriceUnavailableError
from ..models import PriceRound

logger = logging.getLogger(__name__)


class StaticPriceFeed:
    """Price feeds held in memory; every update bumps the round timestamp."""

    def __init__(
        self,
        prices: dict[str, int] | None = None,
        decimals: int = DEFAULT_FEED_DECIMALS,
    ) -> None:
        self.decimals = decimals
        self._rounds: dict[str, PriceRound] = {}
        self._clock = 0
        for feed_id, price in (prices or {}).items():
            self.set_price(feed_id, price)

    @classmethod
    def from_config(cls, config: StaticFeedConfig) -> "StaticPriceFeed":
        return cls(dict(config.prices), decimals=config.decimals)

    def set_price(self, feed_id: str, price: int) -> None:
        """Publish a new answer for ``feed_id`` (already scaled by ``decimals``)."""
        self._clock += 1
        self._rounds[feed_id] = PriceRound(
            price=price, decimals=self.decimals, updated_at=self._clock
        )
        logger.debug("Feed %s updated to %d (round %d)", feed_id, price, self._clock)

    def latest_price(self, feed_id: str) -> PriceRound:
        try:
            return self._rounds[feed_id]
        except KeyError:
            raise PriceUnavailableError(feed_id) from None
