import sys

from event_sync.cli import main

sys.exit(main())
