#!/usr/bin/env python3
"""Dev launcher for the secure-headers demo app.

Usage:
    # Demo page with auto-reload on http://localhost:8000:
    ./dev_server.py

    # Or directly:
    python dev_server.py
"""

import os

import uvicorn

ROOT = os.path.dirname(os.path.abspath(__file__))

# Set defaults for manual testing
os.environ.setdefault("SECURE_HEADERS_LEVEL", "basic")
os.environ.setdefault("SECURE_HEADERS_DETECT_RESOURCES", "true")

if __name__ == "__main__":
    print(f"Security level:    {os.environ['SECURE_HEADERS_LEVEL']}")
    print(f"Detect resources:  {os.environ['SECURE_HEADERS_DETECT_RESOURCES']}")
    print("Header map:        http://localhost:8000/headers")
    print()
    uvicorn.run(
        "secure_headers.demo:create_app",
        factory=True,
        reload=True,
        reload_dirs=[os.path.join(ROOT, "src")],
        host="127.0.0.1",
        port=8000,
    )
