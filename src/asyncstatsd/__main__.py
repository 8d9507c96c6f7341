import sys

from asyncstatsd.cli import main

sys.exit(main())
