# 컬렉션 인덱스 생성
# 앱 스타트업에서 한 번 ensure_indexes(db)를 await로 호출한다.

from app.db.repository import COLLECTION

async def ensure_indexes(db):
    col = db[COLLECTION]

    # 소유자별 목록 조회 / 태그·즐겨찾기 필터
    await col.create_index([("owner_id", 1), ("created_at", -1)])
    await col.create_index([("owner_id", 1), ("tags", 1)])
    await col.create_index([("owner_id", 1), ("favourite", 1)])
