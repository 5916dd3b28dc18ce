from fastapi import FastAPI, HTTPException
from pathlib import Path
import json
import os

app = FastAPI(title="Mock Identity Provider", version="1.0.0")
# Support both local development and Docker
STUB_FILE = (
    Path("/identity_stub/tokens.json")
    if os.path.exists("/identity_stub/tokens.json")
    else Path(__file__).resolve().parents[1] / "identity_stub" / "tokens.json"
)


def load_tokens() -> dict:
    return json.loads(STUB_FILE.read_text())["tokens"]


@app.get("/health")
def health(): return {"status": "ok"}

@app.get("/v1/tokeninfo")
def tokeninfo(token: str):
    identity = load_tokens().get(token)
    if identity is None:
        raise HTTPException(status_code=401, detail="invalid token")
    return identity
