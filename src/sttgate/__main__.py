import sys

from sttgate.cli import main

sys.exit(main())
