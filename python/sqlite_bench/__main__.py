import sys

from sqlite_bench.cli import main

sys.exit(main())
