from __future__ import annotations

import sys

from jappend.cli import main

sys.exit(main())
