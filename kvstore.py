# Production entrypoint: configuration from the environment and data/config/server_config.yml
import sys

from kvstore_lib.cli import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
