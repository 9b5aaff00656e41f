"""Pyth Network price oracle service."""
import logging
import ssl

import aiohttp
import certifi

from ..config import PythConfig
from ..errors import PriceUnavailableError
from ..models import PriceRound

logger = logging.getLogger(__name__)


class PythOracle:
    """Cache of Pyth Network prices.

    ``refresh`` pulls the latest prices over HTTP; ``latest_price`` only reads
    the cache so the engine never blocks on the network mid-operation.
    """

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url
        self.price_feeds = dict(config.feeds)
        self._rounds: dict[str, PriceRound] = {}

    def latest_price(self, feed_id: str) -> PriceRound:
        try:
            return self._rounds[feed_id]
        except KeyError:
            raise PriceUnavailableError(feed_id) from None

    async def refresh(self, feeds: list[str] | None = None) -> dict[str, PriceRound]:
        """Fetch current prices from Pyth Network into the cache.

        Args:
            feeds: Optional list of feed names to refresh. If None, refreshes
                   all configured feeds.

        Returns the rounds fetched by this call; failures leave the cache as is.
        """
        fetched: dict[str, PriceRound] = {}

        wanted = self.price_feeds
        if feeds is not None:
            wanted = {k: v for k, v in self.price_feeds.items() if k in feeds}

        feed_ids = list(set(wanted.values()))
        if not feed_ids:
            return fetched

        query_params = "&".join([f"ids[]={fid}" for fid in feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return fetched

                    data = await response.json()
                    parsed = data.get("parsed", [])

                    # Reverse mapping from Pyth id to feed names
                    id_to_feeds: dict[str, list[str]] = {}
                    for name, pyth_id in wanted.items():
                        id_to_feeds.setdefault(pyth_id, []).append(name)

                    for item in parsed:
                        pyth_id = item.get("id")
                        price_data = item.get("price", {})
                        price_round = PriceRound(
                            price=int(price_data.get("price", 0)),
                            decimals=-int(price_data.get("expo", 0)),
                            updated_at=int(price_data.get("publish_time", 0)),
                        )
                        for name in id_to_feeds.get(pyth_id, []):
                            fetched[name] = price_round

        except Exception as e:
            logger.error("Error fetching prices from Pyth: %s", e)
            return {}

        self._rounds.update(fetched)
        logger.info("Fetched %d prices from Pyth Network", len(fetched))
        for name, price_round in sorted(fetched.items()):
            logger.info(
                "  %s: %d (1e-%d)", name, price_round.price, price_round.decimals
            )
        return fetched
