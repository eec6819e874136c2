#!/usr/bin/env python3
"""Start the depsweep report viewer."""

import os

import uvicorn

if __name__ == "__main__":
    port = int(os.environ.get("PORT", "8000"))
    print("🚀 Starting depsweep report viewer...")
    print(f"📍 URL: http://localhost:{port}")
    print(f"📄 API docs: http://localhost:{port}/docs")
    print("🛑 Press Ctrl+C to stop")
    print()

    uvicorn.run(
        "apps.web.main:app",
        host="127.0.0.1",
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
        reload_dirs=["apps", "core"],
    )
