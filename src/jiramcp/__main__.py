# Allow running as `python -m jiramcp`
import sys

from jiramcp.cli import main

sys.exit(main())
