# app/db/init.py
# Mongo 연결 유틸 — motor
# 커넥션은 main.py 스타트업에서 한 번 만들고 app.state에 보관 (전역 변수 X)

from __future__ import annotations
import asyncio
import logging
from typing import Tuple

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.config import Settings

log = logging.getLogger(__name__)

async def connect(settings: Settings) -> Tuple[AsyncIOMotorClient, AsyncIOMotorDatabase]:
    client = AsyncIOMotorClient(settings.MONGO_URI, serverSelectionTimeoutMS=5000, tz_aware=True)
    db = client[settings.MONGO_DB]
    try:
        # 연결 확인 (준비 안 됐으면 예외)
        await db.command("ping")
    except Exception:
        client.close()
        raise
    return client, db

async def init_db(settings: Settings) -> Tuple[AsyncIOMotorClient, AsyncIOMotorDatabase]:
    # 최대 N회, 일정 간격으로 재시도 (컨테이너 기동 순서 대응)
    last_exc: Exception | None = None
    for i in range(settings.MONGO_STARTUP_RETRIES):
        try:
            return await connect(settings)
        except Exception as e:
            last_exc = e
            log.warning("db init retry %d/%d: %s", i + 1, settings.MONGO_STARTUP_RETRIES, e)
            await asyncio.sleep(settings.MONGO_STARTUP_DELAY_SECONDS)
    raise RuntimeError(f"MongoDB init failed after retries: {last_exc}")

def close_db(client: AsyncIOMotorClient | None) -> None:
    # 앱 종료 시 커넥션 정리
    if client is not None:
        client.close()
