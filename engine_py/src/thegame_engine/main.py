"""FastAPI main application for The Game backend"""

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from .serialization import get_public_match_info
from .sync import InMemoryDocumentStore, Synchronizer
from .ws import handle_websocket

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(synchronizer: Optional[Synchronizer] = None) -> FastAPI:
    app = FastAPI(title="The Game API", version="1.0.0")
    app.state.synchronizer = synchronizer or Synchronizer(InMemoryDocumentStore())

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {"message": "The Game API", "version": "1.0.0"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.get("/matches/{match_id}")
    async def match_info(match_id: str, request: Request):
        state = request.app.state.synchronizer.read(match_id)
        if state is None:
            raise HTTPException(status_code=404, detail="Match not found")
        return get_public_match_info(state)

    @app.websocket("/ws/{player_id}")
    async def websocket_endpoint(websocket: WebSocket, player_id: str):
        await handle_websocket(websocket, player_id, websocket.app.state.synchronizer)

    @app.websocket("/ws")
    async def websocket_endpoint_anonymous(websocket: WebSocket):
        player_id = str(uuid.uuid4())[:8]
        await handle_websocket(websocket, player_id, websocket.app.state.synchronizer)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
