import sys

from k8s_random_secret.cli import main

if __name__ == "__main__":
    sys.exit(main())
