from fastapi import FastAPI, HTTPException, Request
import os

app = FastAPI(title="Mock Risk Advisory Server", version="1.0.0")
# Point ADVISORY_API_BASE at this server for local development
CANNED_ANALYSIS = os.getenv(
    "MOCK_ANALYSIS",
    "Client shows a consistent repayment history.\n\n"
    "Outstanding exposure is moderate relative to past contracts.\n\n"
    "A limited increase of the credit line can be considered.",
)

@app.get("/health")
def health(): return {"status": "ok"}

@app.post("/v1beta/models/{model}:generateContent")
async def generate_content(model: str, request: Request):
    if not request.headers.get("x-goog-api-key"):
        raise HTTPException(status_code=401, detail="missing api key")
    body = await request.json()
    if not body.get("contents"):
        raise HTTPException(status_code=400, detail="empty prompt")
    return {"candidates": [{"content": {"parts": [{"text": CANNED_ANALYSIS}]}}]}
