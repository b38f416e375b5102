import sys

from loan_service.cli import main

sys.exit(main())
