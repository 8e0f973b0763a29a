#!/usr/bin/env python3
"""
Main entry point for the Mars Dashboard.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import sys
from pathlib import Path

# Add the package to the Python path
sys.path.insert(0, str(Path(__file__).parent))

if __name__ == "__main__":
    from mars_dashboard.driver import main
    import asyncio

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("Dashboard stopped by user")
    except Exception as e:
        print(f"Dashboard failed: {e}")
        sys.exit(1)
