"""Allow running as ``python -m ipprobe``."""

from ipprobe.cli import main

if __name__ == "__main__":
    main()
