# =============================================================================
# mailwright Entry Point for `python -m mailwright`
# =============================================================================
# This module allows mailwright to be run as a Python module:
#
#   python -m mailwright --to you@example.com --subject Hi --text Hello
#
# This is equivalent to running the 'mailwright' command after installation.
# =============================================================================

import sys

from mailwright.app import main

if __name__ == "__main__":
    sys.exit(main())
