#!/usr/bin/env python3
"""
HighBuy Monitor - Entry Point
This script ensures proper module paths before importing the main application.
"""
import asyncio
import os
import sys
import traceback
from pathlib import Path

# Get the absolute path to the project root directory
project_root = Path(__file__).parent.resolve()

# Add to Python path if not already there
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

os.environ['PYTHONPATH'] = str(project_root) + os.pathsep + os.environ.get('PYTHONPATH', '')

from main import main  # noqa: E402

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot stopped by user")
    except Exception as e:
        print(f"\nFatal error: {e}")
        traceback.print_exc()
        sys.exit(1)
