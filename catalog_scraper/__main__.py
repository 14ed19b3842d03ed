import sys

from catalog_scraper.main import main

sys.exit(main())
