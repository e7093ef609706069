from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from artdesk import config
from artdesk.routers import algolia, artwork, listings
from artdesk.utils.logger import setup_logging

setup_logging()

app = FastAPI(title="artdesk")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(algolia.router)
app.include_router(artwork.router)
app.include_router(listings.router)


@app.get("/")
def root():
    return {"message": "artdesk backend is live"}
