# teamstock/core/locks.py

"""
키(예: 품목 ID, 팀 ID)별 asyncio.Lock 레지스트리입니다.

동일 프로세스 안에서 같은 키에 대한 읽기-수정-쓰기 구간을 직렬화합니다.
락은 사용 중인 동안만 유지되며(weakref), 이벤트 루프별로 분리됩니다.
"""

import asyncio
import weakref
from typing import Hashable


class KeyedLockRegistry:
    def __init__(self) -> None:
        self._locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, weakref.WeakValueDictionary]" = (
            weakref.WeakKeyDictionary()
        )

    def lock(self, key: Hashable) -> asyncio.Lock:
        """키에 해당하는 락을 반환합니다. `async with registry.lock(key):` 형태로 사용합니다."""
        loop = asyncio.get_running_loop()
        per_loop = self._locks.get(loop)
        if per_loop is None:
            per_loop = weakref.WeakValueDictionary()
            self._locks[loop] = per_loop

        lock = per_loop.get(key)
        if lock is None:
            lock = asyncio.Lock()
            per_loop[key] = lock
        return lock
