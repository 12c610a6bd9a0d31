from __future__ import annotations

import json
from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from xpay_gateway.main import app
SITE_API_DIR = REPO_ROOT / "docs" / "site" / "api"


def main() -> Path:
    SITE_API_DIR.mkdir(parents=True, exist_ok=True)

    out_path = SITE_API_DIR / "openapi.json"
    out_path.write_text(
        json.dumps(app.openapi(), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    print(f"[DOCS][openapi_written] path={out_path.relative_to(REPO_ROOT)}", flush=True)
    return out_path


if __name__ == "__main__":
    main()
