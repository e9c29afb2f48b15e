"""cmd-utils 入口点。

支持: python -m cmd_utils
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
