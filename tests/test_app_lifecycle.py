import time
import unittest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from xpay_gateway.config.settings import Settings
from xpay_gateway.integrations.coingecko_rest import CoinGeckoRestClient
from xpay_gateway.main import app
from xpay_gateway.services.price_feed import STATE_READY, PriceFeed


def _markets_session():
    session = MagicMock()

    def fake_get(url, headers=None, params=None, timeout=None):
        response = MagicMock()
        response.raise_for_status.return_value = None
        page = params.get('page')
        if page == 1:
            response.json.return_value = [
                {'id': 'bitcoin', 'symbol': 'btc', 'current_price': 65000, 'price_change_percentage_24h': 2.1},
            ]
        else:
            response.json.return_value = [
                {'id': 'ethereum', 'symbol': 'eth', 'current_price': 3200, 'price_change_percentage_24h': -1.4},
            ]
        return response

    session.get.side_effect = fake_get
    return session


class AppLifecycleTest(unittest.TestCase):
    def test_feed_preloads_on_startup_and_closes_on_shutdown(self):
        original_feed = app.state.price_feed
        original_get_settings = app.state.get_settings

        session = _markets_session()
        feed = PriceFeed(CoinGeckoRestClient(session=session))
        app.state.price_feed = feed
        app.state.get_settings = lambda: Settings(
            COINGECKO_BASE_URL='https://cg.test/api/v3/',
            PRICE_PRELOAD_PAGES=2,
            PRICE_PER_PAGE=50,
            PRICE_REFRESH_INTERVAL_SEC=60,
        )

        try:
            with TestClient(app) as c:
                deadline = time.time() + 2.0
                while feed.state != STATE_READY and time.time() < deadline:
                    time.sleep(0.01)

                self.assertEqual(feed.state, STATE_READY)
                self.assertEqual(feed.rest_client.base_url, 'https://cg.test/api/v3')
                self.assertEqual(feed.per_page, 50)
                self.assertEqual(feed.refresh_interval_sec, 60)
                self.assertFalse(feed.closed)

                r = c.get('/v1/prices')
                self.assertEqual(set(r.json()['prices']), {'BTC', 'ETH'})

            self.assertTrue(feed.closed)
            self.assertFalse(feed.loading)
            self.assertEqual(feed.metrics()['refresh_in_flight'], 0)
            urls = {call.args[0] for call in session.get.call_args_list}
            self.assertEqual(urls, {'https://cg.test/api/v3/coins/markets'})
        finally:
            app.state.price_feed = original_feed
            app.state.get_settings = original_get_settings


if __name__ == '__main__':
    unittest.main()
