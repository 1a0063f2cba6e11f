from typing import Optional
from fastapi import FastAPI
from api.route import buckets
from fastapi.middleware.cors import CORSMiddleware
from services.objectstore import StorageHelper


def create_app(storage: Optional[StorageHelper] = None) -> FastAPI:
    """
    FastAPIアプリケーションを生成する

    Args:
        storage: 使用するストレージヘルパー。Noneの場合は初回リクエスト時に環境変数から生成
    """
    app = FastAPI()
    app.state.storage = storage
    # CORSミドルウェアの設定
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173"],  # 開発環境用
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(buckets.router, prefix="/api")
    return app


app = create_app()
