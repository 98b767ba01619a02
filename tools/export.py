"""
Command-line export of sampler files from audio on disk.

    python tools/export.py wav kick.wav snare.wav -o out/kit.wav
    python tools/export.py op1 kick.wav - snare.wav --patch-name drums -o out
    python tools/export.py squid --bank 12 --channel kick.wav,snare.wav --channel hat.wav -o out
    python tools/export.py microgranny --sound 00:loop.wav --sound 01:pad.wav --bits 8 -o out
"""
import sys
import os
import argparse
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from samplerkit.core.errors import SamplerKitError
from samplerkit.core.io import AudioIO
from samplerkit.export.exporter import Exporter
from samplerkit.formats.wav import WAV

logger = logging.getLogger("samplerkit.tools.export")

EMPTY_SLOT = "-"


def _load_optional(paths: List[str]) -> list:
    files = []
    for path in paths:
        if path == EMPTY_SLOT:
            files.append(None)
        else:
            p = Path(path)
            files.append((p.name, p.read_bytes()))
    return Exporter.decode_slots(files)


def _write_files(output_dir: Path, files: Dict[str, bytes]) -> None:
    for rel_path, data in files.items():
        target = output_dir / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        print(f"  {target} ({len(data)} bytes)")


def cmd_wav(args) -> int:
    buffers = [AudioIO.load(p) for p in args.inputs]
    for buffer in buffers:
        buffer.convert_to_mono()
        buffer.resample(args.rate)
    wav = WAV(buffers, sample_rate=args.rate, bit_depth=args.bits, cue_points=not args.no_cue)
    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(wav.to_bytes())
    print(f"Wrote {out} (cue offsets: {wav.cue_offsets})")
    return 0


def cmd_op1(args) -> int:
    params: Optional[dict] = None
    if args.params_json:
        with open(args.params_json, "r") as f:
            params = json.load(f)
    slots = _load_optional(args.inputs)
    data = Exporter.op1_drum_patch(slots, params)
    _write_files(Path(args.output), {f"{args.patch_name}.aif": data})
    return 0


def cmd_squid(args) -> int:
    channels = [[AudioIO.load(p) for p in group.split(",") if p] for group in args.channel]
    result = Exporter.squid_bank(channels, bank_number=args.bank, pack_name=args.pack_name)
    _write_files(Path(args.output), result.files)
    for path, reason in result.errors.items():
        print(f"  FAILED {path}: {reason}")
    return 1 if result.errors else 0


def cmd_microgranny(args) -> int:
    slots = Exporter.default_microgranny_slots()
    for entry in args.sound:
        name, _, path = entry.partition(":")
        matches = [s for s in slots if s.name == name.upper()]
        if not matches or not path:
            print(f"Error: --sound expects NAME:FILE with NAME one of {[s.name for s in slots]}")
            return 1
        matches[0].sample = AudioIO.load(path)
        matches[0].bit_depth = args.bits
    result = Exporter.microgranny_bank(slots, preset_name=args.preset)
    _write_files(Path(args.output), result.files)
    for path, reason in result.errors.items():
        print(f"  FAILED {path}: {reason}")
    return 1 if result.errors else 0


def main():
    parser = argparse.ArgumentParser(
        description="Export WAV/AIFF sample files and presets for hardware samplers"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Subcommand")

    p_wav = subparsers.add_parser("wav", help="Concatenate files into one mono WAV with cue points")
    p_wav.add_argument("inputs", nargs="+")
    p_wav.add_argument("-o", "--output", required=True, help="Output .wav path")
    p_wav.add_argument("--rate", type=int, default=44100)
    p_wav.add_argument("--bits", type=int, choices=[8, 16], default=16)
    p_wav.add_argument("--no-cue", action="store_true", help="Omit the cue chunk")

    p_op1 = subparsers.add_parser("op1", help="OP-1 drum patch (.aif); '-' leaves a key empty")
    p_op1.add_argument("inputs", nargs="+")
    p_op1.add_argument("--patch-name", default="patch")
    p_op1.add_argument("--params-json", help="JSON file with op1 overrides")
    p_op1.add_argument("-o", "--output", default=".", help="Output directory")

    p_squid = subparsers.add_parser("squid", help="Squid Salmple bank folder")
    p_squid.add_argument("--channel", action="append", default=[], help="Comma-separated files for one channel (repeat per channel)")
    p_squid.add_argument("--bank", type=int, default=None, help="Bank number 1-99")
    p_squid.add_argument("--pack-name", default=None)
    p_squid.add_argument("-o", "--output", default=".", help="Output directory")

    p_mg = subparsers.add_parser("microgranny", help="Microgranny preset + sounds")
    p_mg.add_argument("--sound", action="append", default=[], help="NAME:FILE, e.g. 00:kick.wav")
    p_mg.add_argument("--preset", default="P01.TXT")
    p_mg.add_argument("--bits", type=int, choices=[8, 16], default=16)
    p_mg.add_argument("-o", "--output", default=".", help="Output directory")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "wav": cmd_wav,
        "op1": cmd_op1,
        "squid": cmd_squid,
        "microgranny": cmd_microgranny,
    }
    try:
        return commands[args.command](args)
    except SamplerKitError as exc:
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
