#!/usr/bin/env python3
from blogbuild.cli import main

if __name__ == "__main__":
    main()
