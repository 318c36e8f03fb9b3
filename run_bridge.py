#!/usr/bin/env python3
"""
Run Sync Bridge

Simple script to start Sync Bridge with default configuration.
"""

import sys
from pathlib import Path

# Add current directory to Python path
sys.path.insert(0, str(Path(__file__).parent))

from sync_bridge.main import main

if __name__ == "__main__":
    main()
