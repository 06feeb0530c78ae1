"""
Command Line Interface for the IMEI scanner
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .capture import CameraSource, iter_file_frames
from .config import PipelineConfig
from .errors import CaptureError
from .export import as_text, mailto_url, save_text
from .modules.detection import FullFrameDetector
from .modules.extraction import StaticTextExtractor
from .pipeline import FrameResult, IMEIScanPipeline
from .preview import save_preview


def _parse_resolution(value: str):
    try:
        width, height = (int(part) for part in value.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid resolution '{value}', expected WxH")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imei-scanner",
        description="Find 15-digit IMEI numbers in photos, videos or a live camera",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scan photos of device labels and save the list
  imei-scanner label1.jpg label2.png -o imeis.txt

  # Sample a video every 10 frames
  imei-scanner boxes.mp4 --video-stride 10

  # Capture 5 frames from the default camera and print a mailto link
  imei-scanner --camera 5 --email

  # Close-up photos: skip region detection and OCR the whole image
  imei-scanner closeup.jpg --full-frame

Exit status is 0 when every input was scanned, 1 when any input or frame
failed (found IMEIs are still printed and saved), 130 on Ctrl-C.
        """
    )

    # Input/Output
    parser.add_argument(
        'inputs',
        nargs='*',
        help='Image or video files to scan'
    )
    parser.add_argument(
        '-o', '--output',
        type=str,
        default=None,
        help='Write the IMEI list to this file (one per line)'
    )
    parser.add_argument(
        '--email',
        action='store_true',
        help='Print a mailto: link containing the results'
    )
    parser.add_argument(
        '--preview',
        type=str,
        default=None,
        help='Directory for annotated frames showing detected regions'
    )

    # Camera
    parser.add_argument(
        '--camera',
        type=int,
        default=0,
        metavar='N',
        help='Capture N frames from the camera (default: 0, no camera)'
    )
    parser.add_argument(
        '--device',
        type=int,
        default=0,
        help='Camera device index (default: 0)'
    )
    parser.add_argument(
        '--resolution',
        type=_parse_resolution,
        default='1920x1080',
        help='Target camera resolution WxH (default: 1920x1080)'
    )

    # Processing options
    parser.add_argument(
        '--full-frame',
        action='store_true',
        help='Skip region detection and OCR the whole frame'
    )
    parser.add_argument(
        '--static-text',
        type=str,
        default=None,
        help='Use a placeholder OCR engine that always returns this text'
    )
    parser.add_argument(
        '--detector-model',
        type=str,
        default=None,
        help='Local YOLOX ONNX file (default: download from the model hub)'
    )
    parser.add_argument(
        '--recognizer-model',
        type=str,
        default=None,
        help='Local recognizer ONNX file (default: download from the model hub)'
    )
    parser.add_argument(
        '--char-dict',
        type=str,
        default=None,
        help='Character dictionary for --recognizer-model'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=4,
        help='Concurrent region extractions (default: 4)'
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=10.0,
        help='Seconds allowed per region extraction (default: 10)'
    )
    parser.add_argument(
        '--video-stride',
        type=int,
        default=15,
        help='Scan every n-th video frame (default: 15)'
    )
    parser.add_argument(
        '--gpu',
        action='store_true',
        help='Enable CUDA acceleration'
    )

    # Verbosity
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    return parser


def _build_pipeline(args) -> IMEIScanPipeline:
    config = PipelineConfig(
        max_workers=args.workers,
        extraction_timeout=args.timeout,
        video_stride=args.video_stride,
    )
    if args.static_text is not None:
        # Placeholder OCR never needs model downloads; pair it with the simple detector too
        return IMEIScanPipeline(
            FullFrameDetector(),
            StaticTextExtractor(args.static_text),
            config=config,
        )
    return IMEIScanPipeline.create(
        detector_model=args.detector_model,
        recognizer_model=args.recognizer_model,
        char_dict=args.char_dict,
        full_frame=args.full_frame,
        use_gpu=args.gpu,
        config=config,
    )


def _report(result: FrameResult, label: str, args, preview_frame=None) -> None:
    if result.failed:
        print(f"  {label}: {type(result.error).__name__}: {result.error}", file=sys.stderr)
        return
    if args.verbose:
        print(
            f"  {label}: {len(result.regions)} text regions, "
            f"{len(result.candidates)} candidates, {len(result.new_imeis)} new"
        )
    if args.preview and preview_frame is not None:
        out = Path(args.preview) / f"frame_{result.frame_id:04d}.png"
        save_preview(preview_frame, result.regions, out, imeis=result.candidates)


def _scan_files(pipeline: IMEIScanPipeline, inputs: List[str], args) -> int:
    failures = 0
    for name in inputs:
        path = Path(name)
        if not path.exists():
            print(f"Error: Input file '{name}' not found", file=sys.stderr)
            failures += 1
            continue
        if args.verbose:
            print(f"Scanning {path.name}...")
        try:
            for frame in iter_file_frames(path, stride=args.video_stride):
                result = pipeline.process_frame(frame)
                _report(result, path.name, args, preview_frame=frame)
                if result.failed:
                    failures += 1
        except CaptureError as e:
            print(f"Error: {e}", file=sys.stderr)
            failures += 1
    return failures


def _scan_camera(pipeline: IMEIScanPipeline, args) -> int:
    width, height = args.resolution
    failures = 0
    pending = []
    try:
        with CameraSource(args.device, width=width, height=height) as camera:
            for _ in range(args.camera):
                frame = camera.read()
                pending.append((frame, pipeline.submit_frame(frame)))
    except CaptureError as e:
        print(f"Error: {e} (stopped after {len(pending)} frames)", file=sys.stderr)
        failures += 1

    for i, (frame, future) in enumerate(pending, start=1):
        result = future.result()
        _report(result, f"camera frame {i}", args, preview_frame=frame)
        if result.failed:
            failures += 1
    return failures


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.inputs and args.camera <= 0:
        parser.error("nothing to scan: give input files or --camera N")

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.preview:
        Path(args.preview).mkdir(parents=True, exist_ok=True)

    try:
        with _build_pipeline(args) as pipeline:
            failures = _scan_files(pipeline, args.inputs, args)
            if args.camera > 0:
                failures += _scan_camera(pipeline, args)
            imeis = pipeline.imeis()

        if imeis:
            print(as_text(imeis))
        elif args.verbose:
            print("No IMEIs found")

        if args.output:
            save_text(imeis, args.output)
            if args.verbose:
                print(f"Saved {len(imeis)} IMEIs to: {args.output}")

        if args.email:
            print(mailto_url(imeis))

        return 1 if failures else 0

    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
