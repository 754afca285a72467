"""Auto-import all tool modules to register them."""
# Import all tool modules - they will auto-register with the global mcp instance
from . import work_items  # noqa: F401
from . import fetch  # noqa: F401
from . import comments  # noqa: F401
