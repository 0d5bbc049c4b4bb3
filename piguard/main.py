from fastapi import Depends, FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from functools import partial
from anyio import to_thread
import asyncio

from piguard import auth, proxy, settings, telemetry, users
from piguard.auth import require_auth
from piguard.database import get_metrics_summary, init_db
from piguard.logger import logger
from piguard.pubsub import subscribe

app = FastAPI(title="Pi Guard")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

init_db()

app.include_router(telemetry.router)
app.include_router(proxy.router)
app.include_router(settings.router)
app.include_router(auth.router)
app.include_router(users.router)

@app.exception_handler(HTTPException)
async def http_error(request: Request, exc: HTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)

@app.get("/api/health")
def health_check():
    return {"status": "ok"}

@app.get("/api/metrics")
def metrics(user: dict = Depends(require_auth)):
    return get_metrics_summary()

@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    pubsub = subscribe()
    if not pubsub:
        await websocket.send_text("Redis not connected")
        await websocket.close()
        return

    try:
        while True:
            # redis-py blocks for up to the timeout, keep it off the event loop
            message = await to_thread.run_sync(
                partial(pubsub.get_message, ignore_subscribe_messages=True, timeout=1)
            )
            if message and message["type"] == "message":
                await websocket.send_text(message["data"].decode())
            await asyncio.sleep(0.1)
    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {str(e)}")
        await websocket.close()
    finally:
        pubsub.close()
