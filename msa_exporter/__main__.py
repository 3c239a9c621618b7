import sys

from msa_exporter.main import main

sys.exit(main())
