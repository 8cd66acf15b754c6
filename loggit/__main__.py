#!/usr/bin/env python3
"""Allow running as: python3 -m loggit <commit-msg-file>"""

import sys

from loggit.cli import main

sys.exit(main())
