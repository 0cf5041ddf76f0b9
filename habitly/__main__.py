import sys

from habitly.cli import main

sys.exit(main())
