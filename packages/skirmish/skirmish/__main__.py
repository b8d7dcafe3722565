import sys

from skirmish.console import main

sys.exit(main())
