import sys

from jobhound.cli import main

sys.exit(main())
