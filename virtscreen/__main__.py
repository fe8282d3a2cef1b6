import sys

from virtscreen.main import main

sys.exit(main())
