#!/usr/bin/env python3
from __future__ import annotations

from markuptree.cli import main

if __name__ == "__main__":
    main()
