"""Allow ``python -m dicom_volume``."""

import sys

from dicom_volume.cli.main import main

sys.exit(main())
