import sys

from vpn_entrypoint.main import main


if __name__=='__main__':
    sys.exit(main())
