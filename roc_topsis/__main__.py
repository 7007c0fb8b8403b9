# -*- coding: utf-8 -*-
"""Allow ``python -m roc_topsis``."""

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())
