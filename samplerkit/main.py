from fastapi import FastAPI, HTTPException, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging
import base64
import binascii

from samplerkit.core.errors import DecodeError, EncodingError
from samplerkit.core.io import AudioIO
from samplerkit.core.types import PresetOptions, PresetSlot
from samplerkit.export.exporter import PRESET_NAME_PATTERN, Exporter
from samplerkit.formats.aiff import AIFF
from samplerkit.formats.wav import WAV
from samplerkit.presets.microgranny import build_preset

# Configure Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("samplerkit")

app = FastAPI(
    title="samplerkit",
    version="1.0.0",
    description="Sample and preset export for hardware samplers"
)

# CORS (Allow Frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

PRESET_MEDIA_TYPE = "application/octet-stream"


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "samplerkit"}


def _file_entry(entry):
    """{"name": ..., "audio": <base64>} -> (name, bytes); None stays None."""
    if entry is None:
        return None
    try:
        return entry.get("name"), base64.b64decode(entry["audio"], validate=True)
    except (AttributeError, KeyError, TypeError, binascii.Error) as exc:
        raise HTTPException(status_code=422, detail=f"invalid audio entry: {exc}")


def _decode_all(files):
    return [AudioIO.decode(content, name=name) for name, content in files]


def _slot(entry: dict) -> PresetSlot:
    """{"name", "options", "bit_depth"} -> PresetSlot; malformed entries are a 400."""
    if not isinstance(entry, dict):
        raise HTTPException(status_code=400, detail=f"slot must be an object, got {entry!r}")
    if not isinstance(entry.get("name", "A1"), str):
        raise HTTPException(status_code=400, detail=f"slot name must be a string, got {entry.get('name')!r}")
    options = entry.get("options") or {}
    if not isinstance(options, dict):
        raise HTTPException(status_code=400, detail=f"slot options must be an object, got {options!r}")
    return PresetSlot(
        name=entry.get("name", "A1"),
        options=PresetOptions(
            tuned=bool(options.get("tuned", True)),
            legato=bool(options.get("legato", False)),
            repeat=bool(options.get("repeat", False)),
            sync=bool(options.get("sync", True)),
            random_shift=bool(options.get("random_shift", options.get("random shift", False))),
        ),
        bit_depth=int(entry.get("bit_depth", 16)),
    )


@app.post("/export/op1")
async def export_op1(data: dict):
    """
    OP-1 drum patch.
    Body: { samples: [ {name, audio(base64)} | null, ... up to 24 ], params?: {...} }
    Keys whose audio fails to decode are left empty.
    """
    files = [_file_entry(e) for e in data.get("samples", [])]
    try:
        slots = await run_in_threadpool(Exporter.decode_slots, files)
        aiff_bytes = await run_in_threadpool(Exporter.op1_drum_patch, slots, data.get("params"))
    except EncodingError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return Response(
        content=aiff_bytes,
        media_type=AIFF.MIME_TYPE,
        headers={"Content-Disposition": f"attachment; filename={data.get('patch_name', 'patch')}.aif"}
    )


@app.post("/export/squid/channel")
async def export_squid_channel(data: dict):
    """
    One Squid Salmple channel WAV.
    Body: { samples: [ {name, audio(base64)}, ... ] }
    """
    files = [_file_entry(e) for e in data.get("samples", []) if e is not None]
    try:
        buffers = await run_in_threadpool(_decode_all, files)
        wav_bytes = await run_in_threadpool(Exporter.squid_channel, buffers, data.get("params"))
    except DecodeError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except EncodingError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return Response(content=wav_bytes, media_type=WAV.MIME_TYPE)


@app.post("/export/microgranny/preset")
async def export_microgranny_preset(data: dict):
    """
    Microgranny preset record file.
    Body: { slots: [ {name, options, bit_depth} | null, ... ], preset_name?: "P01.TXT" }
    """
    try:
        slots = [_slot(e) if e is not None else None for e in data.get("slots", [])]
    except (EncodingError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    preset_name = data.get("preset_name", "P01.TXT")
    if not PRESET_NAME_PATTERN.match(str(preset_name)):
        raise HTTPException(status_code=400, detail=f"invalid preset name: {preset_name!r}")
    return Response(
        content=build_preset(slots),
        media_type=PRESET_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={preset_name}"}
    )


@app.post("/export/microgranny/sample")
async def export_microgranny_sample(data: dict):
    """
    One Microgranny sound WAV (22.05 kHz, slot bit depth).
    Body: { slot: {name, options, bit_depth}, audio: {name, audio(base64)} }
    """
    entry = _file_entry(data.get("audio"))
    if entry is None:
        raise HTTPException(status_code=422, detail="audio is required")
    try:
        slot = _slot(data.get("slot") or {})
        slot.sample = await run_in_threadpool(AudioIO.decode, entry[1], entry[0])
        wav_bytes = await run_in_threadpool(Exporter.microgranny_sample, slot, data.get("params"))
    except DecodeError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except (EncodingError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return Response(
        content=wav_bytes,
        media_type=WAV.MIME_TYPE,
        headers={"Content-Disposition": f"attachment; filename={slot.file_name}"}
    )


if __name__ == "__main__":
    uvicorn.run("samplerkit.main:app", host="0.0.0.0", port=8000, reload=True)
