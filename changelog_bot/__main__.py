import sys

from changelog_bot.main import main


sys.exit(main())
