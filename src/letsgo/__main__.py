"""Allow ``python -m letsgo``."""

from letsgo.cli.main import main

main()
