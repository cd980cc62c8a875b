import sys

from payroll_console.cli import main

sys.exit(main())
