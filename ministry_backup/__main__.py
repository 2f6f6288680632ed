import sys

from ministry_backup.cli import main

sys.exit(main())
