# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/__main__.py
from __future__ import annotations

import sys

from .cli import main as _cli_main


def main() -> None:
    raise SystemExit(_cli_main(sys.argv[1:]))


if __name__ == "__main__":
    main()
