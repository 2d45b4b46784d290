"""envoy-merge CLI エントリポイント"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .exceptions import EnvoyMergeError
from .loader import load_options
from .logger import new_logger
from .plugin import EnvoyProxyPlugin


def _build_parser() -> argparse.ArgumentParser:
    """CLI の引数パーサーを組み立てる。"""
    parser = argparse.ArgumentParser(
        prog="envoy-merge",
        description="Merge per-service Envoy routes and clusters into a base config.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument("items", nargs="*", help="Service directories, in precedence order")
    parser.add_argument("--config", type=Path, help="YAML file holding merge options")
    parser.add_argument("--base", help="Base Envoy config file")
    parser.add_argument("--output", help="Where to write the merged config")
    parser.add_argument(
        "--folder-name", help="Config folder looked up in each service (default: envoy)",
    )
    parser.add_argument("--root-path", help="Prefix for relative paths")
    parser.add_argument("--log-level", default="WARNING", help="Log level")
    parser.add_argument(
        "--log-format", choices=("json", "text"), default="text", help="Log format",
    )
    return parser


def _get_version() -> str:
    """パッケージのバージョンを返す。"""
    from envoy_merge import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI エントリポイント。

    結果を標準出力へ書き、失敗時は終了コード 1 で終了する。
    """
    args = _build_parser().parse_args(argv)
    logger = new_logger(level=args.log_level, format=args.log_format)

    overrides = {
        "base": args.base,
        "output": args.output,
        "folder-name": args.folder_name,
        "root-path": args.root_path,
        "items": args.items or None,
    }
    try:
        options = load_options(args.config, overrides)
    except EnvoyMergeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    response = EnvoyProxyPlugin(logger).execute(options.model_dump(by_alias=True))
    if response.result.startswith("Error: "):
        print(response.result, file=sys.stderr)
        sys.exit(1)
    print(response.result)


if __name__ == "__main__":
    main()
