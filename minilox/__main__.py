import sys

from minilox.cli import main

if __name__ == "__main__":
	sys.exit(main())
