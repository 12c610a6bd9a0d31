import unittest
from unittest.mock import MagicMock

from xpay_gateway.errors import SwapConfigError, SwapUpstreamError
from xpay_gateway.integrations.sideshift_rest import SideShiftRestClient


def _response(payload, *, ok=True, status_code=200):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.json.return_value = payload
    return response


class TestSideShiftRestClient(unittest.TestCase):
    def test_create_order_posts_fixed_order_with_secret_header(self):
        session = MagicMock()
        session.post.return_value = _response({'id': 'ord-1'})
        client = SideShiftRestClient(api_key='secret', base_url='https://ss.test/v2', session=session)

        data = client.create_order(deposit_coin='eth', settle_coin='btc', deposit_amount='0.5')

        self.assertEqual(data, {'id': 'ord-1'})
        session.post.assert_called_once_with(
            'https://ss.test/v2/orders',
            headers={'x-sideshift-secret': 'secret', 'Content-Type': 'application/json'},
            json={'type': 'fixed', 'depositCoin': 'eth', 'settleCoin': 'btc', 'depositAmount': '0.5'},
            timeout=10.0,
        )

    def test_get_order_quotes_order_id(self):
        session = MagicMock()
        session.get.return_value = _response({'id': 'a/b', 'status': 'waiting'})
        client = SideShiftRestClient(api_key='secret', base_url='https://ss.test/v2', session=session)

        client.get_order('a/b')

        args, kwargs = session.get.call_args
        self.assertEqual(args[0], 'https://ss.test/v2/orders/a%2Fb')
        self.assertEqual(kwargs['headers'], {'x-sideshift-secret': 'secret'})

    def test_get_quote_sends_only_given_amounts(self):
        session = MagicMock()
        session.get.return_value = _response({'id': 'q-1'})
        client = SideShiftRestClient(api_key='secret', base_url='https://ss.test/v2', session=session)

        client.get_quote('eth', 'btc', settle_amount='0.01')

        _, kwargs = session.get.call_args
        self.assertEqual(
            kwargs['params'],
            {'depositCoin': 'eth', 'settleCoin': 'btc', 'type': 'fixed', 'settleAmount': '0.01'},
        )

    def test_get_pairs_settle_filter_requires_deposit(self):
        session = MagicMock()
        session.get.return_value = _response([])
        client = SideShiftRestClient(api_key='secret', base_url='https://ss.test/v2', session=session)

        client.get_pairs(settle_coin='btc')
        self.assertEqual(session.get.call_args.kwargs['params'], {})

        client.get_pairs('eth', 'btc')
        self.assertEqual(session.get.call_args.kwargs['params'], {'depositCoin': 'eth', 'settleCoin': 'btc'})

    def test_upstream_error_carries_status_message_and_details(self):
        session = MagicMock()
        payload = {'error': {'message': 'Amount too low'}}
        session.get.return_value = _response(payload, ok=False, status_code=422)
        client = SideShiftRestClient(api_key='secret', session=session)

        with self.assertRaises(SwapUpstreamError) as ctx:
            client.get_quote('eth', 'btc')

        self.assertEqual(ctx.exception.status_code, 422)
        self.assertEqual(ctx.exception.message, 'Failed to get quote')
        self.assertEqual(ctx.exception.details, payload)

    def test_upstream_message_is_preferred(self):
        session = MagicMock()
        session.post.return_value = _response({'message': 'Invalid coin'}, ok=False, status_code=400)
        client = SideShiftRestClient(api_key='secret', session=session)

        with self.assertRaises(SwapUpstreamError) as ctx:
            client.create_order(deposit_coin='nope', settle_coin='btc')

        self.assertEqual(ctx.exception.message, 'Invalid coin')

    def test_missing_api_key_raises_config_error_before_network(self):
        session = MagicMock()
        client = SideShiftRestClient(api_key=None, session=session)

        with self.assertRaises(SwapConfigError):
            client.get_pairs()
        session.get.assert_not_called()

    def test_non_json_success_body_is_upstream_error(self):
        session = MagicMock()
        response = _response(None)
        response.json.side_effect = ValueError('Expecting value')
        session.post.return_value = response
        client = SideShiftRestClient(api_key='secret', session=session)

        with self.assertRaises(SwapUpstreamError) as ctx:
            client.create_order(deposit_coin='eth', settle_coin='btc')

        self.assertEqual(ctx.exception.status_code, 502)
        self.assertIsNone(ctx.exception.details)

    def test_non_json_error_body_keeps_default_message(self):
        session = MagicMock()
        response = _response(None, ok=False, status_code=503)
        response.json.side_effect = ValueError('Expecting value')
        session.get.return_value = response
        client = SideShiftRestClient(api_key='secret', session=session)

        with self.assertRaises(SwapUpstreamError) as ctx:
            client.get_order('ord-1')

        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(ctx.exception.message, 'Failed to get swap status')


if __name__ == '__main__':
    unittest.main()
