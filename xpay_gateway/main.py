from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from xpay_gateway.api.routes import router
from xpay_gateway.config.settings import get_settings, load_settings
from xpay_gateway.integrations.coingecko_rest import CoinGeckoRestClient
from xpay_gateway.services.price_feed import PriceFeed


def _apply_settings(feed: PriceFeed, settings) -> None:
    feed.rest_client.base_url = settings.COINGECKO_BASE_URL.rstrip('/')
    feed.rest_client.timeout = settings.HTTP_TIMEOUT_SEC
    feed.preload_pages = settings.PRICE_PRELOAD_PAGES
    feed.per_page = settings.PRICE_PER_PAGE
    feed.refresh_interval_sec = settings.PRICE_REFRESH_INTERVAL_SEC


@asynccontextmanager
async def lifespan(app: FastAPI):
    feed = app.state.price_feed
    _apply_settings(feed, load_settings(app.state.get_settings))

    feed.start()
    try:
        yield
    finally:
        await feed.close()


app = FastAPI(title="X PAY Price Gateway", version="0.1.0", lifespan=lifespan)
app.include_router(router, prefix="/v1")

# NOTE: lazy-loaded so app import does not require env during tests.
app.state.get_settings = get_settings
app.state.price_feed = PriceFeed(CoinGeckoRestClient())
app.state.swap_client = None
