from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from routers.rooms import rooms_router
from backend import room_registry
from gateway import gateway
from relay import relay
from errors import InvalidMessage
from schemas.rooms import HealthResponse
from schemas.signaling import decode_message
import events
from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL, SERVICE_NAME
from logging_config import get_logger, setup_logging

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)

app = FastAPI(title=SERVICE_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rooms_router)

logger.info("FastAPI application initialized")


@app.get("/", response_model=HealthResponse)
def root():
    return HealthResponse(ok=True, service=SERVICE_NAME, rooms=room_registry.room_count())


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Signaling WebSocket.

    Each text frame is a JSON object whose `type` names the event. The first frame
    sent by the server is `connected` carrying this connection's id.
    """
    await websocket.accept()
    session = gateway.register(websocket)
    logger.info(f"User connected: {session.id}")

    try:
        await gateway.send(session.id, events.CONNECTED, {"id": session.id})

        message_count = 0
        while True:
            try:
                data = await websocket.receive_text()
            except WebSocketDisconnect:
                logger.info(f"WebSocket disconnected normally for connection {session.id}")
                break
            message_count += 1
            logger.debug(f"Received message #{message_count} from connection {session.id}")

            try:
                message = decode_message(data)
            except InvalidMessage as e:
                await relay.report_error(session, e)
                continue

            await relay.dispatch(session, message)
    except Exception as e:
        logger.error(f"WebSocket error for connection {session.id}: {e}", exc_info=True)
    finally:
        # Registry and gateway cleanup run before the first await inside disconnect().
        gateway.unregister(session.id)
        await relay.disconnect(session)
        logger.info(f"User disconnected: {session.id}")
