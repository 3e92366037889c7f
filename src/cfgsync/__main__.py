# Entry point for `python -m cfgsync`
import sys

from cfgsync.cli import main

sys.exit(main())
