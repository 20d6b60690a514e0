import sys

from solder_sync.main import main

sys.exit(main())
