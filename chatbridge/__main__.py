import sys

from chatbridge.api.main import main

sys.exit(main())
