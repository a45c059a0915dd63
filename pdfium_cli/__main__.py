"""Allow ``python -m pdfium_cli``."""

from pdfium_cli.cli import main

if __name__ == '__main__':
    main()
