from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import asdict
from pathlib import Path

from auth.models import AccountRecord, AddTokenResult

MISSING_TOKENS_MESSAGE = "账号缺少必要的令牌"
UPDATED_MESSAGE = "账号已更新"
ADDED_MESSAGE = "账号已添加"


def _same_account(existing: dict, account: AccountRecord) -> bool:
    if existing.get("refresh_token") == account.refresh_token:
        return True
    return bool(account.email) and existing.get("email") == account.email


def merge_account(accounts: list[dict], account: AccountRecord) -> tuple[list[dict], AddTokenResult]:
    if not account.access_token or not account.refresh_token:
        return accounts, AddTokenResult(success=False, message=MISSING_TOKENS_MESSAGE)

    payload = asdict(account)
    merged = list(accounts)
    for index, existing in enumerate(merged):
        if _same_account(existing, account):
            merged[index] = payload
            return merged, AddTokenResult(success=True, message=UPDATED_MESSAGE)

    merged.append(payload)
    return merged, AddTokenResult(success=True, message=ADDED_MESSAGE)


class AccountStore(ABC):
    @abstractmethod
    async def add_token(self, account: AccountRecord) -> AddTokenResult:
        raise NotImplementedError

    @abstractmethod
    async def list_accounts(self) -> list[dict]:
        raise NotImplementedError


class MemoryAccountStore(AccountStore):
    def __init__(self) -> None:
        self._accounts: list[dict] = []

    async def add_token(self, account: AccountRecord) -> AddTokenResult:
        self._accounts, result = merge_account(self._accounts, account)
        return result

    async def list_accounts(self) -> list[dict]:
        return list(self._accounts)


class FileAccountStore(AccountStore):
    def __init__(self, path: str | Path = "accounts.json") -> None:
        self._path = Path(path)

    async def add_token(self, account: AccountRecord) -> AddTokenResult:
        accounts, result = merge_account(self._read_all(), account)
        if result.success:
            self._write_all(accounts)
        return result

    async def list_accounts(self) -> list[dict]:
        return self._read_all()

    def _read_all(self) -> list[dict]:
        if not self._path.exists():
            return []

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as error:
            raise RuntimeError("Account store file is invalid JSON.") from error
        if not isinstance(raw, list):
            raise RuntimeError("Account store file is invalid; expected top-level JSON array.")
        return raw

    def _write_all(self, payload: list[dict]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f"{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        tmp_path = Path(tmp_name)

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
