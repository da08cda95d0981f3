import sys

from alfredlicense.cli import main

if __name__ == "__main__":

    sys.exit(main())
