import sys

from localmr.main import main

sys.exit(main())
