from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from highlight_reel.api.routes.align import router as align_router
from highlight_reel.api.routes.highlights import router as highlights_router

app = FastAPI(
    title="Highlight Reel API",
    description="Find and time-align highlight quotes in conversation transcripts",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_origin_regex=r"http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(align_router)
app.include_router(highlights_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
