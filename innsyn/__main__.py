import sys

from innsyn.cli import main

sys.exit(main())
