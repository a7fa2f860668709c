import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# The app builds its config at import time; keep test runs away from the
# working tree's configs/ and logs/.
_TMP = Path(tempfile.mkdtemp(prefix="adawat-tests-"))
os.environ["ADAWAT_CONFIG_FILE"] = str(_TMP / "missing.toml")
os.environ["ADAWAT_LOG_PATH"] = str(_TMP / "chat_api.jsonl")
os.environ["ADAWAT_DEFAULT_MODEL"] = "llama3"
