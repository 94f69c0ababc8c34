"""Platform capabilities shared by config defaults and the converter."""

import sys

# Word automation through the bundled VBScript exists on Windows only.
EXTERNAL_AUTOMATION_SUPPORTED: bool = sys.platform == "win32"
