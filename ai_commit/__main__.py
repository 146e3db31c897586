import sys

from ai_commit.cli.main import main

sys.exit(main())
