import sys

from sharemyrun.main import main

if __name__ == "__main__":
    sys.exit(main())
