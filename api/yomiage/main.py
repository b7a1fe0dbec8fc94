import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from yomiage.config import settings
from yomiage.dependencies import close_clients
from yomiage.routers import health, problems, readout, verbalize
from yomiage.services.readout import BusyPolicy

logger = logging.getLogger("yomiage")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Yomiage starting up")
    logger.info("VOICEVOX: %s (speaker %d)", settings.voicevox_url, settings.voicevox_speaker_id)
    # Fail at startup rather than on the first readout
    BusyPolicy(settings.readout_busy_policy)

    yield

    await close_clients()
    logger.info("Yomiage shutting down")


API_DESCRIPTION = """
# Yomiage API

読上算（よみあげざん）の問題生成と読み上げ。

## Pipeline

**問題:** 口数・桁数範囲 → 問題生成 → 読上文（ねがいましては…えんでは）

**音声:** 読上文 → パラメータ調整 → VOICEVOX (audio_query → synthesis) → WAV

## 認証

`/health` 以外のエンドポイントには次のヘッダーが必要です:

```
Authorization: Bearer <API_KEY>
```
"""

app = FastAPI(
    title="Yomiage API",
    description=API_DESCRIPTION,
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "health", "description": "サーバーとVOICEVOXの状態"},
        {"name": "problems", "description": "問題の生成・答えの表示"},
        {"name": "verbalize", "description": "数字・計算式の読み"},
        {"name": "readout", "description": "VOICEVOXによる読み上げ音声"},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.prometheus_enabled:
    from yomiage.middleware.metrics import setup_metrics

    setup_metrics(app)

from yomiage.middleware.auth import AuthMiddleware

app.add_middleware(AuthMiddleware)

app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(problems.router, prefix="/api/v1", tags=["problems"])
app.include_router(verbalize.router, prefix="/api/v1", tags=["verbalize"])
app.include_router(readout.router, prefix="/api/v1", tags=["readout"])
