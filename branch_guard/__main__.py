import sys

from branch_guard.cli import main

sys.exit(main())
