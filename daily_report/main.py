from fastapi import FastAPI, UploadFile, File, HTTPException

from .converters import convert_csv
from .errors import CsvFormatError
from .models import ConvertedRecord, ConvertResponse, HealthResponse
from .normalize import decode_csv_bytes

app = FastAPI(
    title="daily-report",
    description="Normalize activity exports (browser history, Slack, calendar) into report records",
    version="0.1.0",
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/convert", response_model=ConvertResponse)
async def convert(file: UploadFile = File(...)):
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    raw = await file.read()
    try:
        records, converter_name = convert_csv(decode_csv_bytes(raw))
    except CsvFormatError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return ConvertResponse(
        converter=converter_name,
        count=len(records),
        records=[ConvertedRecord.from_record(record) for record in records],
    )
