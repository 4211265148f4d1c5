from lfsgate_core.config import CoreConfig, load_core_config
from lfsgate_core.home import LfsGatePaths, ensure_lfsgate_layout, resolve_lfsgate_home

__version__ = "0.1.0"

__all__ = [
    "CoreConfig",
    "LfsGatePaths",
    "__version__",
    "ensure_lfsgate_layout",
    "load_core_config",
    "resolve_lfsgate_home",
]
