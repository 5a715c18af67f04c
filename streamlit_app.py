"""
Streamlit application to track and analyze watched and read media.
"""

import logging

from app.streamlit_app import main
from app.utils import is_debug_mode


logger = logging.getLogger(__name__)
logging.basicConfig(
    level=logging.DEBUG if is_debug_mode() else logging.WARN,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


if __name__ == "__main__":
    main()
