"""エラー表現モジュール.

プロバイダのエラーボディや例外を lastUpdateError に保存できる1本の文字列にする。
"""

from __future__ import annotations

import json
from typing import Any

UNKNOWN_ERROR = "Unknown error"
UNSERIALIZABLE_ERROR = "Unserializable error object"


class ScraperError(Exception):
    """キーワード単位の取得失敗 (HTTP エラー・不正なレスポンスなど)."""


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        for key in ("message", "error", "code"):
            inner = value.get(key)
            if isinstance(inner, (str, int)) and not isinstance(inner, bool):
                return str(inner).strip()
    return ""


def _describe_exception(exc: BaseException, seen: set[int]) -> str:
    seen.add(id(exc))
    message = str(exc).strip() or exc.__class__.__name__
    cause = exc.__cause__
    if cause is not None and id(cause) not in seen:
        return f"{message} (cause: {_describe_exception(cause, seen)})"
    return message


def _describe_mapping(value: dict) -> str:
    parts: list[str] = []

    for key in ("error", "message"):
        text = _text(value.get(key))
        if text and text not in parts:
            parts.append(text)

    request_info = value.get("request_info")
    if isinstance(request_info, dict):
        nested = _text(request_info.get("error"))
        if nested and nested not in parts:
            parts.append(nested)

    # ステータスだけでは読めないので JSON に回す
    if not parts:
        return ""
    status = value.get("status", value.get("statusCode"))
    if isinstance(status, (int, float)) and not isinstance(status, bool):
        parts.insert(0, f"[{int(status)}]")
    return " ".join(parts)


def serialize_error(value: Any) -> str:
    """任意の値を説明的なエラー文字列にする. 例外は投げない.

    - 例外: メッセージ。__cause__ があれば続けて付ける
    - status / error / request_info.error を持つ dict: "[400] error nested" 形式
    - 読めるフィールドのない dict: JSON。循環参照なら UNSERIALIZABLE_ERROR
    - None・空文字: UNKNOWN_ERROR
    """
    if value is None:
        return UNKNOWN_ERROR
    if isinstance(value, str):
        return value if value.strip() else UNKNOWN_ERROR
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, BaseException):
        return _describe_exception(value, set())

    if isinstance(value, dict):
        described = _describe_mapping(value)
        if described:
            return described

    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except ValueError:
        # 循環参照
        return UNSERIALIZABLE_ERROR
    except TypeError:
        try:
            return str(value) or UNKNOWN_ERROR
        except Exception:
            return UNSERIALIZABLE_ERROR
