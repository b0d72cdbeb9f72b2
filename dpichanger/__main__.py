# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Allow running dpichanger as a module: python -m dpichanger

Copyright 2025 DNAi inc.
"""

import sys

from dpichanger.cli import main

if __name__ == "__main__":
    sys.exit(main())
