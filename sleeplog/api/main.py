"""FastAPIアプリケーション。

睡眠記録の CRUD API + 派生クエリAPI + 集計API。
クエリ層の失敗はタグごとに HTTP ステータスへ変換する。
"""

import io
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated

import pandas as pd
from fastapi import Depends, FastAPI, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from sleeplog.config import settings
from sleeplog.dependencies import close_record_store, get_record_service
from sleeplog.interfaces.record_store import SleepRecord
from sleeplog.logging_config import setup_logging
from sleeplog.query.errors import SleepRecordError
from sleeplog.query.service import SleepRecordService

logger = logging.getLogger(__name__)

ServiceDep = Annotated[SleepRecordService, Depends(get_record_service)]

ERROR_STATUS = {
    "NotFound": 404,
    "InvalidQuality": 400,
    "NoRecordsFound": 404,
}

CSV_COLUMNS = ("date", "hours_slept", "quality")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    setup_logging(
        settings.log_level,
        settings.log_file,
        fmt=settings.log_format,
        datefmt=settings.log_date_format,
    )
    logger.info("Starting sleep log API (store=%s)", settings.store_backend)
    yield
    close_record_store()
    logger.info("Stopped sleep log API")


app = FastAPI(
    title="Sleep Log API",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(SleepRecordError)
async def handle_sleep_record_error(
    _request: Request, exc: SleepRecordError
) -> JSONResponse:
    """クエリ層の失敗を {"error": タグ, "detail": メッセージ} に変換する。"""
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.tag, 400),
        content={"error": exc.tag, "detail": exc.message},
    )


# ---------- Pydantic モデル ----------


class SleepPayload(BaseModel):
    """作成・全体更新リクエスト。quality はクエリ層で検証する。"""

    date: str
    hours_slept: float
    quality: str


class QualityPayload(BaseModel):
    """PATCH /api/records/{id}/quality のリクエストボディ。"""

    quality: str


class HoursSleptPayload(BaseModel):
    """PATCH /api/records/{id}/hours-slept のリクエストボディ。"""

    hours_slept: float


class SleepRecordResponse(BaseModel):
    """1件の睡眠記録レスポンス。"""

    id: str
    date: str
    hours_slept: float
    quality: str
    created_at: datetime
    updated_at: datetime | None


# ---------- ヘルパー ----------


def _to_response(record: SleepRecord) -> SleepRecordResponse:
    return SleepRecordResponse(
        id=record.id,
        date=record.date,
        hours_slept=record.hours_slept,
        quality=record.quality.value,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _to_records_body(records: list[SleepRecord]) -> dict:
    return {"records": [_to_response(r) for r in records]}


# ---------- エンドポイント ----------


@app.get("/api/health")
async def health_check():
    """ヘルスチェック。"""
    return {"status": "ok"}


@app.get("/api/records")
async def get_records(service: ServiceDep):
    """全記録を取得する。"""
    return _to_records_body(service.get_all())


@app.post("/api/records")
async def post_record(body: SleepPayload, service: ServiceDep):
    """記録を1件作成する。"""
    record = service.add(body.date, body.hours_slept, body.quality)
    return _to_response(record)


@app.post("/api/records/csv")
async def post_records_csv(file: UploadFile, service: ServiceDep):
    """CSV（date,hours_slept,quality）から記録を一括作成する。

    空欄（空文字列）を含む行はスキップする。hours_slept が数値でない行や
    quality が不正な行が1件でもあれば何も作成しない。
    """
    content = await file.read()
    try:
        df = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        raise HTTPException(status_code=400, detail="empty CSV file")

    missing = [c for c in CSV_COLUMNS if c not in df.columns]
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"missing columns: {', '.join(missing)}",
        )

    # 末尾の欠けたフィールドは NaN になるため空欄として扱う
    df = df[list(CSV_COLUMNS)].fillna("")
    for column in CSV_COLUMNS:
        df[column] = df[column].str.strip()
    complete = df[(df != "").all(axis=1)]
    skipped = len(df) - len(complete)

    hours = pd.to_numeric(complete["hours_slept"], errors="coerce")
    if hours.isna().any():
        # ヘッダ行を1行目とした行番号
        bad_lines = [str(i + 2) for i in hours[hours.isna()].index]
        raise HTTPException(
            status_code=400,
            detail=f"hours_slept is not numeric on line {', '.join(bad_lines)}",
        )

    items = [
        (date, float(h), quality)
        for date, h, quality in zip(complete["date"], hours, complete["quality"])
    ]
    created = service.add_many(items)
    return {"inserted": len(created), "skipped": skipped}


@app.get("/api/records/page")
async def get_records_page(service: ServiceDep, page: int = 1, page_size: int = 10):
    """ページ単位で取得する（page は1始まり）。"""
    return _to_records_body(service.paginate(page, page_size))


@app.get("/api/records/search")
async def search_records(date: str, service: ServiceDep):
    """日付が一致する記録を取得する。"""
    return _to_records_body(service.search_by_date(date))


@app.get("/api/records/quality/{quality}")
async def get_records_by_quality(quality: str, service: ServiceDep):
    """quality が一致する記録を取得する。"""
    return _to_records_body(service.filter_by_quality(quality))


@app.get("/api/records/range")
async def get_records_by_range(
    start_date: str, end_date: str, service: ServiceDep
):
    """期間内（両端含む）の記録を取得する。"""
    return _to_records_body(service.get_by_date_range(start_date, end_date))


@app.get("/api/records/range/total-hours")
async def get_total_hours_by_range(
    start_date: str, end_date: str, service: ServiceDep
):
    """期間内の睡眠時間合計。"""
    total = service.get_total_hours_by_date_range(start_date, end_date)
    return {"total_hours": total}


@app.delete("/api/records")
async def delete_records_older_than(before: str, service: ServiceDep):
    """before より前の日付の記録を一括削除する。"""
    return _to_records_body(service.delete_older_than(before))


@app.get("/api/records/{record_id}")
async def get_record(record_id: str, service: ServiceDep):
    """記録を1件取得する。"""
    return _to_response(service.get_one(record_id))


@app.put("/api/records/{record_id}")
async def put_record(record_id: str, body: SleepPayload, service: ServiceDep):
    """記録を全体更新する。"""
    record = service.update(record_id, body.date, body.hours_slept, body.quality)
    return _to_response(record)


@app.patch("/api/records/{record_id}/quality")
async def patch_record_quality(
    record_id: str, body: QualityPayload, service: ServiceDep
):
    """quality のみ更新する。"""
    return _to_response(service.update_quality(record_id, body.quality))


@app.patch("/api/records/{record_id}/hours-slept")
async def patch_record_hours_slept(
    record_id: str, body: HoursSleptPayload, service: ServiceDep
):
    """hours_slept のみ更新する。"""
    return _to_response(service.update_hours_slept(record_id, body.hours_slept))


@app.delete("/api/records/{record_id}")
async def delete_record(record_id: str, service: ServiceDep):
    """記録を1件削除し、削除した記録を返す。"""
    return _to_response(service.delete(record_id))


@app.get("/api/stats/average-duration")
async def get_average_duration(service: ServiceDep):
    """全記録の平均睡眠時間。"""
    return {"average_hours": service.get_average_duration()}


@app.get("/api/stats/dominant-quality")
async def get_dominant_quality(service: ServiceDep):
    """最も多い quality。"""
    return {"quality": service.get_dominant_quality().value}
