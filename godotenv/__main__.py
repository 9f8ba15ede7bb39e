import sys

from godotenv.main import main

sys.exit(main())
