import sys

from grmon.cli import main

sys.exit(main())
