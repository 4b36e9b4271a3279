# SPDX-License-Identifier: MIT
"""Allow running gobuild as ``python -m gobuild``."""

import sys

from gobuild.cli import main

sys.exit(main())
