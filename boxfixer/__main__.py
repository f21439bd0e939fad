#
# This file is part of BoxFixer.
#
# SPDX-License-Identifier: BSD-2-Clause

import sys

from boxfixer.cli import main

if __name__ == '__main__':
    sys.exit(main())
