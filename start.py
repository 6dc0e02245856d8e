"""Production startup for the DemoDrop API.

Binds to $PORT (set by the hosting platform) and serves ``api.server:app``.
"""
import os
import sys
from pathlib import Path

import uvicorn

sys.path.insert(0, str(Path(__file__).parent / "src"))


def main() -> None:
    port = int(os.environ.get("PORT", "10000"))
    log_level = os.environ.get("LOG_LEVEL", "info").lower()
    print(f"[start.py] Starting DemoDrop API on port {port}", flush=True)
    uvicorn.run("api.server:app", host="0.0.0.0", port=port, log_level=log_level, proxy_headers=True)


if __name__ == "__main__":
    main()
