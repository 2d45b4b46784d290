"""envoy-merge の例外型定義"""

from __future__ import annotations


class EnvoyMergeError(Exception):
    """envoy-merge のエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class ConfigNotFoundError(EnvoyMergeError):
    """ベース設定が存在しない、または読み込めない場合のエラー。"""

    def __init__(self, path: str, cause: Exception | None = None) -> None:
        super().__init__(
            code=EnvoyMergeErrorCodes.CONFIG_NOT_FOUND,
            message=f"base envoy config not found at {path}",
            cause=cause,
        )
        self.path = path


class EnvoyMergeErrorCodes:
    """EnvoyMergeError のエラーコード定数。"""

    CONFIG_NOT_FOUND: str = "CONFIG_NOT_FOUND"
    INVALID_BASE: str = "INVALID_BASE"
    INVALID_FRAGMENT: str = "INVALID_FRAGMENT"
    COMPILE_FAILED: str = "COMPILE_FAILED"
    VALIDATION: str = "VALIDATION_ERROR"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    WRITE_FILE: str = "WRITE_FILE_ERROR"
