#!/usr/bin/env python3
"""Start the API with uvicorn, honoring the PORT environment variable used by hosting platforms."""

import os
import sys

import uvicorn


def _port() -> int:
    raw = os.environ.get("PORT", "8000")
    try:
        return int(raw)
    except ValueError:
        print(f"Warning: Invalid PORT value '{raw}', using default 8000", file=sys.stderr)
        return 8000


def main() -> None:
    port = _port()
    print(f"Starting Voitheia API on port {port}...", file=sys.stderr)
    uvicorn.run(
        "voitheia.main:app",
        host="0.0.0.0",
        port=port,
        proxy_headers=True,  # Trust X-Forwarded-* from the platform proxy
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
