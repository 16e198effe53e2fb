"""Allow ``python -m linkscout.cli`` execution."""

import sys

from linkscout.cli.main import main

sys.exit(main())
