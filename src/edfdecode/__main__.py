"""Entry point for ``python -m edfdecode``."""

from edfdecode.cli import main

if __name__ == "__main__":
    main()
