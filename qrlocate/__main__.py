import sys

from qrlocate.cli import main

sys.exit(main())
