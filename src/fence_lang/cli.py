"""Command-line interface for fence-lang."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .config import EngineSettings, split_list
from .engine import LanguageDetectionEngine, create_default_engine

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def read_source(path: str | None) -> str:
    """Read code from a file, or from stdin when no path (or "-") is given."""
    if path is None or path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def build_engine(args: argparse.Namespace, settings: EngineSettings) -> LanguageDetectionEngine:
    """Create the default engine and apply command-line overrides."""
    engine = create_default_engine(settings)

    config_file = getattr(args, "config", None)
    if config_file:
        result = engine.configuration.import_configuration(Path(config_file).read_text(encoding="utf-8"))
        for warning in result.warnings:
            logger.warning(warning)
        if not result.success:
            raise ValueError(f"Invalid configuration file: {'; '.join(result.errors)}")

    overrides = {}
    if getattr(args, "order", None):
        overrides["detection_order"] = split_list(args.order)
    if getattr(args, "threshold", None) is not None:
        overrides["confidence_threshold"] = args.threshold
    if getattr(args, "languages", None) is not None:
        overrides["enabled_pattern_languages"] = split_list(args.languages)

    if overrides:
        result = engine.set_configuration(overrides)
        if not result.success:
            raise ValueError("; ".join(result.errors))

    return engine


async def run_detect(engine: LanguageDetectionEngine, code: str, args: argparse.Namespace) -> int:
    """
    Run one of the detection protocols and print the outcome.

    Returns:
        Exit code: 0 when a language was detected, 1 otherwise
    """
    if args.analyze:
        analysis = await engine.detect_with_analysis(code)
        if args.json:
            print(json.dumps(analysis.to_dict(), indent=2))
        else:
            primary = analysis.primary
            print(f"Primary: {primary.language} ({primary.confidence}%)" if primary else "Primary: none")
            for result in analysis.alternatives:
                print(f"Alternative: {result.language} ({result.confidence}%) via {result.source_name}")
            for result in analysis.fallbacks:
                print(f"Fallback: {result.language} ({result.confidence}%) via {result.source_name}")
            print(f"Consensus: {analysis.analysis.consensus_language or 'none'}")
        return 0 if analysis.primary else 1

    if args.all:
        results = await engine.detect_with_all_methods(code)
        if args.json:
            print(json.dumps([result.to_dict() for result in results], indent=2))
        else:
            for result in results:
                print(f"{result.source_name}: {result.language} ({result.confidence}%)")
        return 0 if results else 1

    result = await engine.detect_language(code)
    if args.json:
        print(json.dumps(result.to_dict() if result else None, indent=2))
    elif result:
        print(f"{result.language} ({result.confidence}%)")
    else:
        print("unknown")
    return 0 if result else 1


def run_languages(engine: LanguageDetectionEngine, as_json: bool) -> int:
    languages = engine.supported_languages()
    if as_json:
        print(json.dumps(languages))
    else:
        print("\n".join(languages))
    return 0


def run_config(engine: LanguageDetectionEngine, args: argparse.Namespace) -> int:
    manager = engine.configuration

    if args.action == "export":
        print(manager.export_configuration())
        return 0

    if args.action == "validate":
        validation = manager.validate_configuration()
        summary = manager.get_configuration_summary()
        print(f"Status: {summary.status}")
        for issue in validation.issues:
            print(f"Issue: {issue}")
        for warning in validation.warnings:
            print(f"Warning: {warning}")
        for recommendation in validation.recommendations:
            print(f"Recommendation: {recommendation}")
        return 0 if validation.is_valid else 1

    # import
    result = manager.import_configuration(read_source(args.file))
    for warning in result.warnings:
        print(f"Warning: {warning}")
    if not result.success:
        for error in result.errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1
    print("Configuration imported")
    print(manager.export_configuration())
    return 0


async def main(args: argparse.Namespace, settings: EngineSettings) -> int:
    """
    Execute a parsed command.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    try:
        engine = build_engine(args, settings)

        if args.command == "detect":
            code = read_source(args.file)
            return await run_detect(engine, code, args)
        if args.command == "languages":
            return run_languages(engine, args.json)
        return run_config(engine, args)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1
    except Exception as e:
        logger.error(f"Command failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fence-lang",
        description="fence-lang - Detect the programming language of code snippets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Detect the language of a file
  fence-lang detect snippet.txt

  # Detect from stdin with every detector and print JSON
  cat snippet.txt | fence-lang detect --all --json

  # Full analysis with a lower threshold
  fence-lang detect snippet.txt --analyze --threshold 50

  # Export and re-import the configuration
  fence-lang config export > config.json
  fence-lang config import config.json

  # Using environment variables
  export FENCE_LANG_CONFIDENCE_THRESHOLD=60
  export FENCE_LANG_PATTERN_LANGUAGES=python,bash
  fence-lang detect snippet.txt
        """,
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: FENCE_LANG_LOG_LEVEL or WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    detect = subparsers.add_parser("detect", help="Detect the language of code")
    detect.add_argument("file", nargs="?", default=None, help="File to read (default: stdin)")
    mode = detect.add_mutually_exclusive_group()
    mode.add_argument("--all", action="store_true", help="Run every registered detector")
    mode.add_argument("--analyze", action="store_true", help="Report primary, alternatives and consensus")
    detect.add_argument("--threshold", type=float, default=None, help="Confidence threshold (0-100)")
    detect.add_argument("--order", default=None, help="Comma-separated detection order")
    detect.add_argument("--languages", default=None, help="Comma-separated enabled languages")
    detect.add_argument("--config", default=None, help="JSON configuration file to import")
    detect.add_argument("--json", action="store_true", help="Print results as JSON")

    languages = subparsers.add_parser("languages", help="List supported languages")
    languages.add_argument("--json", action="store_true", help="Print results as JSON")

    config = subparsers.add_parser("config", help="Export, validate or import configuration")
    config.add_argument("action", choices=["export", "validate", "import"])
    config.add_argument("file", nargs="?", default=None, help="Configuration file for import (default: stdin)")
    config.add_argument("--config", default=None, help="JSON configuration file to apply first")

    return parser


def cli(argv: list[str] | None = None):
    """Command-line interface for fence-lang."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        settings = EngineSettings.from_env()
    except ValueError as e:
        parser.error(f"Invalid environment configuration: {e}")

    if args.verbose:
        level = logging.DEBUG
    elif args.log_level:
        level = getattr(logging, args.log_level)
    else:
        level = settings.logging_level
    logging.basicConfig(level=level, format=LOG_FORMAT)

    if args.command == "detect" and args.threshold is not None and not 0 <= args.threshold <= 100:
        parser.error("--threshold must be between 0 and 100")

    sys.exit(asyncio.run(main(args, settings)))


if __name__ == "__main__":
    cli()
