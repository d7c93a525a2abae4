"""
Harmony Service - Main Entry Point

Scores a landmark file or a photo from the command line, or runs the
HTTP API.
"""

import argparse
import json
import os
import sys
from pathlib import Path

from .analysis.pipeline import analyze_landmarks, format_metrics
from .analysis.reference import load_reference_tables
from .app import create_app, load_landmark_detector
from .config import load_config
from .errors import (
    ConfigurationError,
    DetectionError,
    DetectorUnavailableError,
    GeometryError,
    InputError,
)
from .imaging import decode_image
from .logging_config import setup_logging, get_logger
from .report import render_text_report

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_INPUT = 2
EXIT_UNANALYZABLE = 3


def _load_local_env() -> None:
    """Load environment variables from harmony_service/.env if present."""
    env_path = Path(__file__).resolve().parent / '.env'
    if not env_path.exists():
        return

    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, value = line.split('=', 1)
        os.environ.setdefault(key.strip(), value.strip())


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Harmony Service - Facial Harmony Scoring'
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--landmarks',
        type=str,
        help='JSON file with 68 [x, y] landmarks (or {"landmarks": [...]})'
    )
    source.add_argument(
        '--image',
        type=str,
        help='Photo to detect landmarks in (requires the detector extra)'
    )
    source.add_argument(
        '--serve',
        action='store_true',
        help='Run the HTTP API'
    )

    parser.add_argument(
        '--gender',
        type=str,
        help='Reference set: male or female'
    )

    parser.add_argument(
        '--format',
        choices=['json', 'text'],
        default='json',
        help='Output format for a single analysis'
    )

    parser.add_argument(
        '--port',
        type=int,
        help='HTTP port for --serve (or set PORT)'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    if not args.serve and not args.gender:
        parser.error('Missing gender. Provide --gender male|female.')

    return args


def _read_landmarks(path: str):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise InputError(f'cannot read landmarks from {path}: {e}') from e
    if isinstance(data, dict):
        return data.get('landmarks')
    return data


def _detect_landmarks(path: str, config):
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise InputError(f'cannot read image {path}: {e}') from e

    image = decode_image(data)
    return load_landmark_detector(config).detect(image)


def run_analysis(args, config) -> int:
    tables = load_reference_tables(config)

    if args.landmarks:
        landmarks = _read_landmarks(args.landmarks)
    else:
        landmarks = _detect_landmarks(args.image, config)

    result = analyze_landmarks(landmarks, args.gender, tables, config)

    if args.format == 'text':
        sys.stdout.write(render_text_report(result, tables))
    else:
        payload = result.to_dict()
        payload['formattedMetrics'] = format_metrics(result, tables)
        sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + '\n')

    return EXIT_OK


def serve(args, config) -> None:
    port = args.port or config.port
    logger.info(f'Starting harmony API on {config.host}:{port}...')
    app = create_app(config)
    app.run(
        host=config.host,
        port=port,
        threaded=True,
        debug=False,
        use_reloader=False
    )


def main(argv=None) -> int:
    """Main entry point."""
    _load_local_env()
    args = parse_args(argv)
    config = load_config()

    # Keep stdout clean for report output unless serving
    setup_logging(
        config.service_name,
        args.debug or config.debug_mode,
        stream=None if args.serve else sys.stderr,
    )

    try:
        if args.serve:
            serve(args, config)
            return EXIT_OK
        return run_analysis(args, config)

    except InputError as e:
        logger.error(f'❌ Invalid input: {e}')
        return EXIT_INPUT
    except (GeometryError, DetectionError) as e:
        logger.error(f'❌ Could not analyze this photo: {e}')
        return EXIT_UNANALYZABLE
    except DetectorUnavailableError as e:
        logger.error(f'❌ {e}')
        return EXIT_FATAL
    except ConfigurationError as e:
        logger.error(f'Fatal configuration error: {e}', exc_info=True)
        return EXIT_FATAL
    except KeyboardInterrupt:
        logger.info('Received keyboard interrupt, shutting down...')
        return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
