import sys

from fernet_codec.main import main

sys.exit(main())
