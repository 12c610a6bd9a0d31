import json
import subprocess
import sys
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from xpay_gateway.main import app


class SmokeTest(unittest.TestCase):
    def test_api_docs_build_writes_openapi(self):
        repo_root = Path(__file__).resolve().parents[1]
        subprocess.run([sys.executable, 'scripts/build_api_docs_site.py'], cwd=repo_root, check=True)

        openapi_path = repo_root / 'docs/site/api/openapi.json'
        self.assertTrue(openapi_path.exists())

        paths = json.loads(openapi_path.read_text(encoding='utf-8'))['paths']
        for path in (
            '/v1/prices',
            '/v1/prices/{symbol}',
            '/v1/prices/resolve',
            '/v1/swaps',
            '/v1/swaps/quote',
            '/v1/swaps/pairs',
            '/v1/swaps/{order_id}',
            '/v1/swaps/simulate',
            '/v1/portfolio/risk',
            '/v1/assistant/reply',
        ):
            self.assertIn(path, paths)

    def test_openapi_endpoint_served(self):
        c = TestClient(app)
        r = c.get('/openapi.json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()['info']['title'], 'X PAY Price Gateway')


if __name__ == '__main__':
    unittest.main()
