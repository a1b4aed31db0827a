import sys
import os

# Serverless runtimes start here; put the project root on the path so `node`, `core` and `ledger` import.
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from node.server import app  # noqa: E402,F401  (the runtime serves this object)
