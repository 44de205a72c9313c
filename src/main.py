import logging

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from pathlib import Path

import config
from scoreboard.router import router as scoreboard_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
config.warn_if_ai_disabled()

app = FastAPI(title="Free Fire Tournament Results Maker")
app.mount("/static", StaticFiles(directory=Path(__file__).resolve().parent / "static"), name="static")
app.include_router(scoreboard_router)

# Routes

@app.get("/")
async def index():
    return RedirectResponse("/scoreboard/", status_code=303)

@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT)
