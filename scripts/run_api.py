#!/usr/bin/env python
"""
Run the Responsible Tool API with the host/port and mapping from Settings.

Usage:
    python scripts/run_api.py [--reload]
"""
import sys
from pathlib import Path

import uvicorn

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from responsible_tool.config.settings import get_settings


def main():
    settings = get_settings()
    if not settings.mapping_json.exists():
        print(f"ERROR: compiled mapping not found at {settings.mapping_json}")
        print("Run `compile-mapping` or scripts/build_all.py first.")
        sys.exit(1)

    print(f"Starting Responsible Tool API on {settings.api_host}:{settings.api_port} ({settings.timezone})...")
    uvicorn.run(
        "responsible_tool.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload='--reload' in sys.argv,
        reload_dirs=[str(src_path)] if '--reload' in sys.argv else None,
    )


if __name__ == "__main__":
    main()
