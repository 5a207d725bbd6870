import sys

from iou_cli.main import main

sys.exit(main())
