#!/usr/bin/env python3
"""
File Storage Shell

Thin launcher for client.cli so the shell runs from a source checkout.

@.architecture
Incoming: Command line --- {CLI args}
Processing: main() --- {1 job: delegation}
Outgoing: client/cli.py --- {argv, exit code}
"""

import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from client.cli import main  # noqa: E402


if __name__ == "__main__":
    sys.exit(main())
