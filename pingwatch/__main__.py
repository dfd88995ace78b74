"""Allow running as ``python -m pingwatch``."""

from . import main

main()
