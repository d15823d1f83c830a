import sys

from trendmonitor.cli import main

sys.exit(main())
