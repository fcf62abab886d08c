import sys

from nifti2png.cli import main

sys.exit(main())
