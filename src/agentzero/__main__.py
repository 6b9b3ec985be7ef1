import sys

from agentzero.cli import main

sys.exit(main())
