import sys

from inplace_adjoint.cli import main

sys.exit(main())
