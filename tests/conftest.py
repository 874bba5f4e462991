import os
import tempfile

os.environ.setdefault("WC_DATA_DIR", tempfile.mkdtemp(prefix="wc_test_data_"))
