"""envoy-merge: サービスごとの Envoy ルート/クラスター定義をベース設定へマージする。"""

from .compiler import Compiler, resolve_route_list
from .discovery import ConfigDiscovery
from .exceptions import ConfigNotFoundError, EnvoyMergeError, EnvoyMergeErrorCodes
from .fs_tools import list_dir_contents
from .loader import load_options, parse_options
from .logger import new_logger
from .models import DirContents, ExecutionResponse, MergeOptions, ServiceFragment
from .plugin import EnvoyProxyPlugin, run_merge
from .yaml_tools import dump_yaml, read_yaml, write_yaml

__version__ = "0.1.0"

__all__ = [
    "ServiceFragment",
    "DirContents",
    "MergeOptions",
    "ExecutionResponse",
    "ConfigDiscovery",
    "Compiler",
    "resolve_route_list",
    "EnvoyProxyPlugin",
    "run_merge",
    "list_dir_contents",
    "read_yaml",
    "dump_yaml",
    "write_yaml",
    "load_options",
    "parse_options",
    "new_logger",
    "EnvoyMergeError",
    "EnvoyMergeErrorCodes",
    "ConfigNotFoundError",
]
