"""leakscan - find objects that must not be retained in an object graph."""

from leakscan._version import __version__
from leakscan.config import ScanConfig, load_config
from leakscan.exceptions import ConfigError, InvalidRootError, LeakscanError
from leakscan.introspect import children, introspection_scope, render, type_name
from leakscan.orchestrator import check_for_leaks, import_and_check
from leakscan.predicates import DEFAULT_SKIP_TYPES, any_of, from_modules, instance_of, is_proxy
from leakscan.report import LeakReport, PathEntry, ScanResult
from leakscan.scanner import LeakScanner, scan
from leakscan.sink import MessageStatus, OperationType, Reporter

__all__ = [
    "__version__",
    "LeakScanner",
    "scan",
    "LeakReport",
    "PathEntry",
    "ScanResult",

    "is_proxy",
    "instance_of",
    "from_modules",
    "any_of",
    "DEFAULT_SKIP_TYPES",
    "children",
    "introspection_scope",
    "render",
    "type_name",

    "check_for_leaks",
    "import_and_check",
    "Reporter",
    "MessageStatus",
    "OperationType",
    "ScanConfig",
    "load_config",
    "LeakscanError",
    "InvalidRootError",
    "ConfigError",
]
