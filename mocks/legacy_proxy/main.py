from fastapi import FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse
from pathlib import Path
import json
import os

app = FastAPI(title="Mock Legacy Proxy", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path("/legacy_stub") if os.path.exists("/legacy_stub") else Path(__file__).resolve().parents[1] / "legacy_stub"

@app.get("/health")
def health(): return {"status": "ok"}

@app.get("/api/proxy/v1/legacy-service/credit-card")
def get_credit_cards(canal: str | None = Header(None, alias="Canal")):
    if not canal:
        raise HTTPException(status_code=400, detail="Canal header is required")
    file = DATA_DIR / f"credit_cards_{canal}.json"
    if not file.exists():
        raise HTTPException(status_code=404, detail="channel not found")
    payload = json.loads(file.read_text())
    total_count = payload.pop("totalCount", len(payload.get("creditCardFacilities", [])))
    return JSONResponse(content=payload, headers={"Total-Count": str(total_count)})
